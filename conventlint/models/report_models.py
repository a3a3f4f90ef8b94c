"""
Report Data Models — Violations and aggregated check results.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Violation(BaseModel):
    """A single detected deviation from a convention rule."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    file: str = Field(..., description="File path, or the commit message source")
    line: int = Field(..., ge=0, description="1-based line number, 0 for file-level entries")
    rule_id: str = Field(..., description="Convention rule id or error kind")
    severity: Severity
    message: str = Field(..., description="Human-readable explanation")

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


class FileResult(BaseModel):
    """Violations found in one file, in discovery order."""

    path: str
    violations: list[Violation] = Field(default_factory=list)


class CheckReport(BaseModel):
    """Result of checking a set of files."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    violations: list[Violation] = Field(default_factory=list)
    files_checked: int = 0
    files_skipped: int = 0
    cancelled: bool = False

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.is_error)

    @property
    def warning_count(self) -> int:
        return len(self.violations) - self.error_count

    @property
    def ok(self) -> bool:
        """True when no error-severity violation exists; warnings never count."""
        return self.error_count == 0
