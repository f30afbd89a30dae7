"""Flattens analysis artifacts into the JSON report served by the web app."""

from __future__ import annotations

from typing import Dict, Iterable, List

from mini_analyzer import AnalysisArtifacts, Diagnostic, SymbolTable, Token, TokenKind
from webapp.schemas import AnalysisReport, ErrorOut, SymbolOut, TokenCounts, TokenOut

COUNTED_KINDS = (TokenKind.RESERVED, TokenKind.IDENT, TokenKind.NUMBER, TokenKind.SYMBOL, TokenKind.ERROR)


def count_tokens(tokens: Iterable[Token]) -> TokenCounts:
	counts: Dict[str, int] = {kind.category: 0 for kind in COUNTED_KINDS}
	total = 0
	for token in tokens:
		if token.kind == TokenKind.EOF:
			continue
		counts[token.kind.category] += 1
		total += 1
	return TokenCounts(total=total, **counts)


def token_rows(tokens: Iterable[Token]) -> List[TokenOut]:
	return [
		TokenOut(kind=t.kind.name, literal=t.literal, line=t.line, column=t.column, category=t.kind.category)
		for t in tokens
	]


def error_rows(diagnostics: Iterable[Diagnostic]) -> List[ErrorOut]:
	return [ErrorOut(origin=d.origin, message=d.message, line=d.line, column=d.column) for d in diagnostics]


def symbol_rows(table: SymbolTable) -> List[SymbolOut]:
	return [
		SymbolOut(name=s.name, type=s.type_name, value=s.value, line=s.line, column=s.column)
		for s in table.symbols()
	]


def build_report(art: AnalysisArtifacts) -> AnalysisReport:
	return AnalysisReport(
		source=art.source,
		duration_ms=art.duration_ms,
		tokens=token_rows(art.tokens),
		token_counts=count_tokens(art.tokens),
		errors=error_rows(art.diagnostics),
		symbols=symbol_rows(art.symbols),
	)
