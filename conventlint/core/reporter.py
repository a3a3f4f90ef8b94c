"""
Reporter — Renders violations as text or JSON and derives the exit status.

Rendering preserves the order it is given; callers sort check reports by file
path first so repeated runs produce byte-identical output.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Iterable, Literal, Sequence

from conventlint.errors import EXIT_OK, EXIT_VIOLATIONS
from conventlint.models.report_models import Violation

ReportFormat = Literal["text", "json"]
FORMATS: tuple[str, ...] = ("text", "json")


def order_by_file(violations: Iterable[Violation]) -> list[Violation]:
    """Stable sort by file path; per-file discovery order is kept."""
    return sorted(violations, key=lambda v: v.file)


def render_text(violations: Sequence[Violation]) -> str:
    """One `file:line: severity: message [ruleId]` line per violation."""
    return "".join(
        f"{v.file}:{v.line}: {v.severity.value}: {v.message} [{v.rule_id}]\n"
        for v in violations
    )


def render_json(violations: Sequence[Violation]) -> str:
    """JSON array of violation records with stable field names."""
    records = [v.model_dump(mode="json", by_alias=True) for v in violations]
    return json.dumps(records, indent=2) + "\n"


def render(violations: Sequence[Violation], fmt: ReportFormat = "text") -> str:
    if fmt == "json":
        return render_json(violations)
    if fmt == "text":
        return render_text(violations)
    raise ValueError(f"Unknown report format: {fmt}")


def exit_code(violations: Iterable[Violation]) -> int:
    """0 unless an error-severity violation exists; warnings never fail."""
    return EXIT_VIOLATIONS if any(v.is_error for v in violations) else EXIT_OK


def write_report(text: str, output: str | Path | None = None) -> None:
    """Write a rendered report to a file, or stdout when no path is given."""
    if output is None or str(output) == "-":
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    Path(output).write_text(text, encoding="utf-8")
