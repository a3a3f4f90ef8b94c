"""
Commit Message Models — Decomposed conventional-commit messages.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CommitMessage(BaseModel):
    """A commit message split into header fields and body."""

    model_config = ConfigDict(frozen=True)

    header: str
    type: str
    scope: str | None = None
    breaking: bool = False
    subject: str
    body: str | None = Field(default=None, description="Text after the header, without the separator")
    body_start_line: int = Field(default=0, description="Line number of the first body line, 0 when absent")
    has_separator: bool = True

    @property
    def body_lines(self) -> list[str]:
        return self.body.splitlines() if self.body else []

    @property
    def has_rationale(self) -> bool:
        """True when the body carries at least one non-empty line."""
        return any(line.strip() for line in self.body_lines)
