"""
Extractor — Lazily yields documentation units from source text.

A unit is a maximal run of contiguous comment-only lines. The run counts when
it is the file header (only blank lines or a shebang before it) or when the
line right after it is a top-level declaration. Any other comment run is
ignored.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence

from conventlint.core.filetypes import FileType
from conventlint.models.unit_models import DocumentationUnit

logger = logging.getLogger("conventlint.extractor")


def _comment_runs(flags: Sequence[bool], start: int) -> Iterator[tuple[int, int]]:
    """Yield (first, last) 0-based index pairs of contiguous comment lines."""
    run_start: int | None = None
    for index in range(start, len(flags)):
        if flags[index]:
            if run_start is None:
                run_start = index
        elif run_start is not None:
            yield run_start, index - 1
            run_start = None
    if run_start is not None:
        yield run_start, len(flags) - 1


def extract_units(text: str, file_type: FileType) -> Iterator[DocumentationUnit]:
    """
    Yield the documentation units of a file in source order.

    Args:
        text: Full file content.
        file_type: Resolved file type supplying comment syntax and declarations.

    Yields:
        DocumentationUnit per header or declaration comment run. Files without
        comments yield nothing.
    """
    # Only "\n" ends a line, matching what editors number
    lines = text.replace("\r\n", "\n").split("\n")
    style = file_type.style
    flags = style.classify(lines)
    start = 1 if lines and lines[0].startswith("#!") else 0
    declarations = file_type.declarations(lines)

    header_open = True
    for first, last in _comment_runs(flags, start):
        is_header = header_open and all(not line.strip() for line in lines[start:first])
        header_open = False
        declaration = declarations.get(last + 1)

        if is_header or declaration is not None:
            raw = tuple(lines[first : last + 1])
            yield DocumentationUnit(
                start_line=first + 1,
                end_line=last + 1,
                lines=raw,
                text_lines=tuple(style.strip(line) for line in raw),
                is_header=is_header,
                declaration=declaration,
            )
        else:
            logger.debug(f"Skipping detached comment at lines {first + 1}-{last + 1}")
