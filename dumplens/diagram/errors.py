"""Syntax errors raised while parsing ER diagram text."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SyntaxErrorDetail(BaseModel):
    """Structured description of a parse failure."""

    message: str = Field(description="Error message")
    line: Optional[int] = Field(None, description="Line number where error occurred (1-indexed)")
    column: Optional[int] = Field(None, description="Column number where error occurred (1-indexed)")
    found: Optional[str] = Field(None, description="Token or character that was found")
    expected: Optional[List[str]] = Field(None, description="List of expected tokens")
    context: Optional[str] = Field(None, description="Context snippet showing error location")

    def format_message(self) -> str:
        parts = [f"Syntax error: {self.message}"]

        if self.line is not None and self.column is not None:
            parts.append(f"Location: line {self.line}, column {self.column}")

        if self.found:
            parts.append(f"Found: {repr(self.found)}")

        if self.expected:
            if len(self.expected) == 1:
                parts.append(f"Expected: {self.expected[0]}")
            elif len(self.expected) <= 5:
                parts.append(f"Expected one of: {', '.join(self.expected)}")
            else:
                parts.append(f"Expected one of: {', '.join(self.expected[:5])} (and {len(self.expected) - 5} more)")

        if self.context:
            parts.append(f"\nContext:\n{self.context}")

        return "\n".join(parts)


class DiagramSyntaxError(Exception):
    """Raised when diagram text does not follow the ER grammar."""

    def __init__(self, detail: SyntaxErrorDetail):
        self.detail = detail
        super().__init__(detail.format_message())

    @property
    def line(self) -> Optional[int]:
        return self.detail.line

    @property
    def column(self) -> Optional[int]:
        return self.detail.column
