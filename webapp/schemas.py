from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
	source: str = Field(..., description="Program text to analyze.")


class TokenOut(BaseModel):
	kind: str
	literal: str
	line: int
	column: int
	category: str


class TokenCounts(BaseModel):
	reserved: int = 0
	identifier: int = 0
	number: int = 0
	symbol: int = 0
	error: int = 0
	total: int = Field(0, description="All tokens except the end-of-input marker.")


class ErrorOut(BaseModel):
	origin: str = Field(..., description="'syntax' or 'semantic'.")
	message: str
	line: int
	column: int


class SymbolOut(BaseModel):
	name: str
	type: str
	value: Optional[Any] = None
	line: int
	column: int


class AnalysisReport(BaseModel):
	source: str
	duration_ms: float
	tokens: List[TokenOut]
	token_counts: TokenCounts
	errors: List[ErrorOut]
	symbols: List[SymbolOut]
