"""
Documentation Unit Models — Comment spans extracted from source files.

These models are the output of the extractor and the input to the rule engine.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DocumentationUnit(BaseModel):
    """A contiguous run of comment lines attached to the file header or a declaration."""

    model_config = ConfigDict(frozen=True)

    start_line: int = Field(..., ge=1, description="First line of the run (1-based)")
    end_line: int = Field(..., ge=0, description="Last line of the run; start_line - 1 when empty")
    lines: tuple[str, ...] = Field(default=(), description="Raw source lines")
    text_lines: tuple[str, ...] = Field(
        default=(), description="Lines with comment markers stripped"
    )
    is_header: bool = False
    declaration: str | None = Field(
        default=None, description="Name of the declaration the run documents"
    )

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def text(self) -> str:
        return "\n".join(self.text_lines)

    @classmethod
    def empty_header(cls) -> DocumentationUnit:
        """Stand-in header for files that have none."""
        return cls(start_line=1, end_line=0, is_header=True)
