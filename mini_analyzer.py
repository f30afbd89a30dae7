"""Mini analyzer for the do-while teaching language: scanner, parser and semantic checker."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Diagnostic infrastructure


@dataclass(frozen=True)
class Diagnostic:
	message: str
	line: int
	column: int

	origin = "diagnostic"


@dataclass(frozen=True)
class SyntaxDiagnostic(Diagnostic):
	origin = "syntax"


@dataclass(frozen=True)
class SemanticDiagnostic(Diagnostic):
	origin = "semantic"


# ---------------------------------------------------------------------------
# Scanner


class TokenKind(Enum):
	RESERVED = "reserved"
	IDENT = "identifier"
	NUMBER = "number"
	SYMBOL = "symbol"
	EOF = "eof"
	ERROR = "error"

	@property
	def category(self) -> str:
		return self.value


RESERVED_WORDS: Mapping[str, TokenKind] = MappingProxyType({
	"int": TokenKind.RESERVED,
	"do": TokenKind.RESERVED,
	"while": TokenKind.RESERVED,
})

SYMBOLS: FrozenSet[str] = frozenset({"=", "==", "+", "*", ";", "{", "}", "(", ")"})

LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
DIGITS = frozenset("0123456789")
WHITESPACE = frozenset(" \t\r\n")


@dataclass(frozen=True)
class Token:
	kind: TokenKind
	literal: str
	line: int
	column: int

	def describe(self) -> str:
		if self.kind == TokenKind.EOF:
			return "end of input"
		return f"'{self.literal}'"


class Scanner:
	"""Turns source text into tokens, one at a time.

	The cursor only moves forward, so repeated calls past the end keep
	returning the end-of-input token.
	"""

	def __init__(self, source: str) -> None:
		self.source = source
		self.length = len(source)
		self.index = 0
		self.line = 1
		self.column = 1

	def scan_all(self) -> List[Token]:
		tokens: List[Token] = []
		while True:
			token = self.next_token()
			tokens.append(token)
			if token.kind == TokenKind.EOF:
				break
		logger.debug("scanned %d tokens over %d lines", len(tokens), self.line)
		return tokens

	def next_token(self) -> Token:
		self._skip_whitespace()
		line, column = self.line, self.column
		if self._is_eof():
			return Token(TokenKind.EOF, "", line, column)
		ch = self._peek()
		if ch in LETTERS:
			lexeme = self._consume_while(lambda c: c in LETTERS or c in DIGITS)
			return Token(RESERVED_WORDS.get(lexeme, TokenKind.IDENT), lexeme, line, column)
		if ch in DIGITS:
			lexeme = self._consume_while(lambda c: c in DIGITS)
			return Token(TokenKind.NUMBER, lexeme, line, column)
		self._advance()
		if ch == "=" and self._peek_is("="):
			self._advance()
			return Token(TokenKind.SYMBOL, "==", line, column)
		if ch in SYMBOLS:
			return Token(TokenKind.SYMBOL, ch, line, column)
		logger.debug("unrecognized character %r at %d:%d", ch, line, column)
		return Token(TokenKind.ERROR, ch, line, column)

	def _skip_whitespace(self) -> None:
		while not self._is_eof() and self._peek() in WHITESPACE:
			self._advance()

	def _consume_while(self, predicate) -> str:
		start_index = self.index
		while not self._is_eof() and predicate(self._peek()):
			self._advance()
		return self.source[start_index:self.index]

	def _advance(self) -> str:
		ch = self.source[self.index]
		self.index += 1
		if ch == "\n":
			self.line += 1
			self.column = 1
		else:
			self.column += 1
		return ch

	def _peek(self) -> str:
		return self.source[self.index]

	def _peek_is(self, expected: str) -> bool:
		return not self._is_eof() and self.source[self.index] == expected

	def _is_eof(self) -> bool:
		return self.index >= self.length


# ---------------------------------------------------------------------------
# AST definitions
#
# Node positions point at the first token of the node and are left out of
# equality so trees compare structurally.


@dataclass(frozen=True)
class Identifier:
	name: str
	line: int = field(default=0, compare=False)
	column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class NumberLiteral:
	text: str
	line: int = field(default=0, compare=False)
	column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class BinaryOp:
	left: "Expression"
	operator: str
	right: "Expression"
	line: int = field(default=0, compare=False)
	column: int = field(default=0, compare=False)


Expression = Union[Identifier, NumberLiteral, BinaryOp]


@dataclass(frozen=True)
class VariableDeclaration:
	type_name: str
	name: str
	value: Expression
	line: int = field(default=0, compare=False)
	column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Assignment:
	target: str
	value: Expression
	line: int = field(default=0, compare=False)
	column: int = field(default=0, compare=False)


@dataclass(frozen=True)
class DoWhileLoop:
	body: Tuple[Assignment, ...]
	condition: Expression
	line: int = field(default=0, compare=False)
	column: int = field(default=0, compare=False)


Statement = Union[VariableDeclaration, DoWhileLoop, Assignment]


@dataclass(frozen=True)
class Program:
	statements: Tuple[Statement, ...] = ()


# ---------------------------------------------------------------------------
# Parser


ARITHMETIC_OPERATORS = ("+", "*")


class Parser:
	"""Recursive-descent parser over a pre-scanned token list.

	``current`` is the token under examination and ``peek`` the one after it.
	Statement parsers leave ``current`` on the last token they consumed; the
	caller steps past it.
	"""

	def __init__(self, tokens: Sequence[Token]) -> None:
		self.tokens: List[Token] = list(tokens)
		if not self.tokens or self.tokens[-1].kind != TokenKind.EOF:
			last = self.tokens[-1] if self.tokens else None
			line = last.line if last else 1
			column = last.column + len(last.literal) if last else 1
			self.tokens.append(Token(TokenKind.EOF, "", line, column))
		self.index = 0
		self.errors: List[SyntaxDiagnostic] = []

	@property
	def current(self) -> Token:
		return self._token_at(self.index)

	@property
	def peek(self) -> Token:
		return self._token_at(self.index + 1)

	def parse_program(self) -> Program:
		statements: List[Statement] = []
		max_iterations = 2 * len(self.tokens)
		iterations = 0
		while not self._current_is_eof():
			iterations += 1
			if iterations > max_iterations:
				self._error("Too many iterations, possible infinite loop; parsing stopped")
				break
			token = self.current
			if token.literal == "int":
				statement: Optional[Statement] = self._parse_variable_declaration()
			elif token.literal == "do":
				statement = self._parse_do_while()
			elif token.kind == TokenKind.IDENT and self._peek_literal_is("="):
				statement = self._parse_assignment()
			else:
				self._error(f"Unexpected token {token.describe()}")
				self._next_token()
				continue
			if statement is not None:
				statements.append(statement)
			self._next_token()
		logger.debug("parsed %d statements with %d syntax errors", len(statements), len(self.errors))
		return Program(statements=tuple(statements))

	def _parse_variable_declaration(self) -> Optional[VariableDeclaration]:
		start = self.current
		if not self._expect_peek_kind(TokenKind.IDENT, "variable name after 'int'"):
			return None
		name = self.current.literal
		if not self._expect_peek("=", f"'=' after variable '{name}'"):
			return None
		self._next_token()
		value = self._parse_complete_expression()
		if value is None:
			return None
		if not self._expect_peek(";", "';' after variable declaration"):
			return None
		return VariableDeclaration(type_name=start.literal, name=name, value=value, line=start.line, column=start.column)

	def _parse_assignment(self) -> Optional[Assignment]:
		start = self.current
		if not self._expect_peek("=", f"'=' after '{start.literal}'"):
			return None
		self._next_token()
		value = self._parse_complete_expression()
		if value is None:
			return None
		if not self._expect_peek(";", "';' after assignment"):
			return None
		return Assignment(target=start.literal, value=value, line=start.line, column=start.column)

	def _parse_do_while(self) -> Optional[DoWhileLoop]:
		start = self.current
		if not self._expect_peek("{", "'{' after 'do'"):
			# Skip the body and resynchronize on the condition clause.
			while not self._current_is_eof() and self.current.literal != "while":
				self._next_token()
			if self._current_is_eof():
				return None
			condition = self._parse_while_condition()
			if condition is None:
				return None
			return DoWhileLoop(body=(), condition=condition, line=start.line, column=start.column)
		self._next_token()
		body: List[Assignment] = []
		while not self._current_is_eof() and self.current.literal != "}":
			if self.current.kind == TokenKind.IDENT and self._peek_literal_is("="):
				assignment = self._parse_assignment()
				if assignment is not None:
					body.append(assignment)
				elif self.current.literal == "}":
					break
			else:
				self._error(f"Expected assignment in loop body, got {self.current.describe()}")
			self._next_token()
		if self.current.literal != "}":
			self._error("Expected '}' to close loop body, got end of input")
			return None
		if not self._expect_peek("while", "'while' after loop body"):
			return None
		condition = self._parse_while_condition()
		if condition is None:
			return None
		return DoWhileLoop(body=tuple(body), condition=condition, line=start.line, column=start.column)

	def _parse_while_condition(self) -> Optional[Expression]:
		"""Parse ``( Simple == Simple ) ;`` with ``current`` on ``while``."""
		if not self._expect_peek("(", "'(' after 'while'"):
			return None
		self._next_token()
		condition = self._parse_comparison()
		if condition is None:
			while not self._current_is_eof() and self.current.literal != ")":
				self._next_token()
			if self.current.literal == ")" and self._peek_literal_is(";"):
				self._next_token()
			return None
		if not self._expect_peek(")", "')' after loop condition"):
			return None
		if not self._expect_peek(";", "';' after do-while loop"):
			return None
		return condition

	def _parse_simple_expression(self) -> Optional[Expression]:
		token = self.current
		if token.kind == TokenKind.IDENT:
			return Identifier(name=token.literal, line=token.line, column=token.column)
		if token.kind == TokenKind.NUMBER:
			return NumberLiteral(text=token.literal, line=token.line, column=token.column)
		self._error(f"Expected identifier or number, got {token.describe()}")
		return None

	def _parse_complete_expression(self) -> Optional[Expression]:
		left = self._parse_simple_expression()
		if left is None:
			return None
		if self.peek.literal not in ARITHMETIC_OPERATORS or self.peek.kind != TokenKind.SYMBOL:
			return left
		self._next_token()
		operator = self.current.literal
		self._next_token()
		right = self._parse_simple_expression()
		if right is None:
			return None
		return BinaryOp(left=left, operator=operator, right=right, line=left.line, column=left.column)

	def _parse_comparison(self) -> Optional[Expression]:
		left = self._parse_simple_expression()
		if left is None:
			return None
		if not self._expect_peek("==", "'==' in loop condition"):
			return None
		self._next_token()
		right = self._parse_simple_expression()
		if right is None:
			return None
		return BinaryOp(left=left, operator="==", right=right, line=left.line, column=left.column)

	# Utility parsing helpers -------------------------------------------------

	def _expect_peek(self, literal: str, expected: str) -> bool:
		if self._peek_literal_is(literal):
			self._next_token()
			return True
		self._error(f"Expected {expected}, got {self.peek.describe()}")
		return False

	def _expect_peek_kind(self, kind: TokenKind, expected: str) -> bool:
		if self.peek.kind == kind:
			self._next_token()
			return True
		self._error(f"Expected {expected}, got {self.peek.describe()}")
		return False

	def _peek_literal_is(self, literal: str) -> bool:
		token = self.peek
		return token.kind in (TokenKind.SYMBOL, TokenKind.RESERVED) and token.literal == literal

	def _next_token(self) -> None:
		if self.index < len(self.tokens) - 1:
			self.index += 1

	def _token_at(self, index: int) -> Token:
		if index >= len(self.tokens):
			return self.tokens[-1]
		return self.tokens[index]

	def _current_is_eof(self) -> bool:
		return self.current.kind == TokenKind.EOF

	def _error(self, message: str) -> None:
		token = self.current
		logger.debug("syntax error at %d:%d: %s", token.line, token.column, message)
		self.errors.append(SyntaxDiagnostic(message, token.line, token.column))


# ---------------------------------------------------------------------------
# Symbol table


@dataclass
class Symbol:
	name: str
	type_name: str
	value: Optional[object] = None
	line: int = 0
	column: int = 0


class SymbolTable:
	def __init__(self) -> None:
		self._symbols: Dict[str, Symbol] = {}

	def define(self, name: str, type_name: str, value: Optional[object] = None, line: int = 0, column: int = 0) -> Symbol:
		symbol = Symbol(name, type_name, value, line, column)
		self._symbols[name] = symbol
		return symbol

	def update(self, name: str, value: object) -> bool:
		symbol = self._symbols.get(name)
		if symbol is None:
			return False
		symbol.value = value
		return True

	def lookup(self, name: str) -> Optional[Symbol]:
		return self._symbols.get(name)

	def is_declared(self, name: str) -> bool:
		return name in self._symbols

	def symbols(self) -> List[Symbol]:
		return list(self._symbols.values())

	def __contains__(self, name: object) -> bool:
		return name in self._symbols

	def __len__(self) -> int:
		return len(self._symbols)


# ---------------------------------------------------------------------------
# Semantic checker


# Names that are never reported as undeclared; kept for compatibility with
# programs that use `x` as a loop control variable without declaring it.
IMPLICIT_NAMES: FrozenSet[str] = frozenset({"x"})


class SemanticChecker:
	def __init__(self, implicit_names: Iterable[str] = IMPLICIT_NAMES) -> None:
		self.implicit_names = frozenset(implicit_names)
		self.table = SymbolTable()
		self.errors: List[SemanticDiagnostic] = []

	def check(self, program: Program) -> Tuple[SymbolTable, List[SemanticDiagnostic]]:
		self._collect_declarations(program.statements)
		self._verify_uses(program.statements)
		logger.debug("checked program: %d symbols, %d semantic errors", len(self.table), len(self.errors))
		return self.table, self.errors

	def _collect_declarations(self, statements: Iterable[Statement]) -> None:
		for stmt in statements:
			if isinstance(stmt, VariableDeclaration):
				if self.table.is_declared(stmt.name):
					self._error(f"Variable '{stmt.name}' already declared", stmt.line, stmt.column)
				else:
					self.table.define(stmt.name, stmt.type_name)
			elif isinstance(stmt, DoWhileLoop):
				self._collect_declarations(stmt.body)
			elif not isinstance(stmt, Assignment):
				raise TypeError(f"Unknown statement node: {stmt!r}")

	def _verify_uses(self, statements: Iterable[Statement]) -> None:
		for stmt in statements:
			if isinstance(stmt, VariableDeclaration):
				self._verify_expression(stmt.value)
			elif isinstance(stmt, Assignment):
				self._verify_name(stmt.target, stmt.line, stmt.column)
				self._verify_expression(stmt.value)
			elif isinstance(stmt, DoWhileLoop):
				self._verify_uses(stmt.body)
				self._verify_expression(stmt.condition)
			else:
				raise TypeError(f"Unknown statement node: {stmt!r}")

	def _verify_expression(self, expr: Expression) -> None:
		if isinstance(expr, Identifier):
			self._verify_name(expr.name, expr.line, expr.column)
		elif isinstance(expr, BinaryOp):
			self._verify_expression(expr.left)
			self._verify_expression(expr.right)
		elif not isinstance(expr, NumberLiteral):
			raise TypeError(f"Unknown expression node: {expr!r}")

	def _verify_name(self, name: str, line: int, column: int) -> None:
		if name in self.implicit_names or self.table.is_declared(name):
			return
		self._error(f"Variable '{name}' used before declared", line, column)

	def _error(self, message: str, line: int, column: int) -> None:
		logger.debug("semantic error at %d:%d: %s", line, column, message)
		self.errors.append(SemanticDiagnostic(message, line, column))


# ---------------------------------------------------------------------------
# Analysis pipeline


def scan(source: str) -> List[Token]:
	return Scanner(source).scan_all()


def parse(tokens: Sequence[Token]) -> Tuple[Program, List[SyntaxDiagnostic]]:
	parser = Parser(tokens)
	program = parser.parse_program()
	return program, parser.errors


def check(program: Program, implicit_names: Iterable[str] = IMPLICIT_NAMES) -> Tuple[SymbolTable, List[SemanticDiagnostic]]:
	return SemanticChecker(implicit_names).check(program)


@dataclass
class AnalysisArtifacts:
	source: str
	tokens: List[Token]
	program: Program
	syntax_errors: List[SyntaxDiagnostic]
	symbols: SymbolTable
	semantic_errors: List[SemanticDiagnostic]
	duration_ms: float

	@property
	def diagnostics(self) -> List[Diagnostic]:
		return [*self.syntax_errors, *self.semantic_errors]


class AnalysisEngine:
	def __init__(self, implicit_names: Iterable[str] = IMPLICIT_NAMES) -> None:
		self.implicit_names = frozenset(implicit_names)

	def analyze(self, source: str) -> AnalysisArtifacts:
		start = time.perf_counter()
		tokens = scan(source)
		program, syntax_errors = parse(tokens)
		symbols, semantic_errors = check(program, self.implicit_names)
		duration_ms = (time.perf_counter() - start) * 1000
		logger.debug(
			"analysis finished in %.2f ms: %d tokens, %d syntax errors, %d semantic errors",
			duration_ms,
			len(tokens),
			len(syntax_errors),
			len(semantic_errors),
		)
		return AnalysisArtifacts(
			source=source,
			tokens=tokens,
			program=program,
			syntax_errors=syntax_errors,
			symbols=symbols,
			semantic_errors=semantic_errors,
			duration_ms=duration_ms,
		)


# ---------------------------------------------------------------------------
# Command line


def main(argv: Optional[Sequence[str]] = None) -> int:
	args = list(sys.argv[1:] if argv is None else argv)
	if len(args) != 1:
		print("Usage: mini-analyzer <file>")
		return 1
	source_path = Path(args[0])
	try:
		source = source_path.read_text(encoding="utf-8")
	except OSError as exc:
		print(f"Cannot read {source_path}: {exc}", file=sys.stderr)
		return 1
	artifacts = AnalysisEngine().analyze(source)
	for diagnostic in artifacts.diagnostics:
		print(f"[{diagnostic.origin.upper()}] line {diagnostic.line}, column {diagnostic.column}: {diagnostic.message}")
	for symbol in artifacts.symbols.symbols():
		print(f"{symbol.type_name} {symbol.name}")
	token_count = len(artifacts.tokens) - 1
	print(f"Tokens: {token_count} | Errors: {len(artifacts.diagnostics)} | Time: {artifacts.duration_ms:.2f} ms")
	return 1 if artifacts.diagnostics else 0


if __name__ == "__main__":
	sys.exit(main())
