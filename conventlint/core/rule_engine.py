"""
Rule Engine — Evaluates documentation units against convention rules.

Rule selection is deterministic: among the rules whose glob matches a path,
the longest pattern wins and ties go to the rule declared first. The engine
holds only the immutable rule set, so one instance is safely shared by every
worker.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import PurePosixPath

from conventlint.core.extractor import extract_units
from conventlint.core.filetypes import FileType, detect_file_type, get_file_type
from conventlint.errors import UnsupportedFileType
from conventlint.models.report_models import Violation
from conventlint.models.rule_models import ConventionRule, RuleSet, TagMatch
from conventlint.models.unit_models import DocumentationUnit

logger = logging.getLogger("conventlint.engine")


def _segment_regex(segment: str) -> str:
    """Regex for one path segment; wildcards never cross '/'."""
    out: list[str] = []
    i, n = 0, len(segment)
    while i < n:
        c = segment[i]
        i += 1
        if c == "*":
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = segment.find("]", i + 1 if segment[i : i + 1] in ("!", "]") else i)
            if end < 0:
                out.append(re.escape(c))
                continue
            body = segment[i:end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append(f"[{body}]")
            i = end + 1
        else:
            out.append(re.escape(c))
    return "".join(out)


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    for segment in pattern.split("/"):
        if segment == "**":
            # Zero or more whole directories
            parts.append("(?:[^/]+/)*")
        else:
            parts.append(_segment_regex(segment) + "/")
    regex = "".join(parts)
    if regex.endswith("/"):
        regex = regex[:-1]
    elif regex.endswith("(?:[^/]+/)*"):
        regex = regex[: -len("(?:[^/]+/)*")] + ".*"
    return re.compile(regex + r"\Z")


def glob_matches(pattern: str, path: str) -> bool:
    """
    Match a configuration glob against a POSIX-style relative path.

    Patterns without '/' match the file name alone. Patterns with '/' match
    the whole path segment by segment: '*' and '?' stay inside one segment
    and only a '**' segment spans directories, including none.
    """
    posix = path.replace("\\", "/")
    if posix.startswith("./"):
        posix = posix[2:]
    if "/" not in pattern:
        return _compile_glob(pattern).match(PurePosixPath(posix).name) is not None
    return _compile_glob(pattern).match(posix) is not None


def tag_present(tag: str, unit: DocumentationUnit, mode: TagMatch) -> bool:
    """Case-insensitive check for a tag in a unit's comment text."""
    needle = tag.lower()
    if mode is TagMatch.PREFIX:
        return any(line.lower().startswith(needle + ":") for line in unit.text_lines)
    return needle in unit.text.lower()


class RuleEngine:
    """
    Deterministic convention rule engine.

    Pure functions over the rule set: no I/O, no shared mutable state.
    """

    def __init__(self, rule_set: RuleSet) -> None:
        self.rule_set = rule_set

    def select_rule(self, path: str) -> ConventionRule | None:
        """Return the most specific matching rule, or None."""
        best: ConventionRule | None = None
        for rule in self.rule_set.rules:
            if not glob_matches(rule.pattern, path):
                continue
            # Strictly longer only, so earlier rules win ties
            if best is None or len(rule.pattern) > len(best.pattern):
                best = rule
        return best

    def resolve_file_type(self, path: str, rule: ConventionRule | None = None) -> FileType:
        """
        Resolve a path's file type.

        Order: configured `fileTypes` globs, the rule's own `fileType`, then
        the registry's file name and extension tables.

        Raises:
            UnsupportedFileType: nothing claims the path.
        """
        for pattern, type_name in self.rule_set.file_types.items():
            if glob_matches(pattern, path):
                return get_file_type(type_name)
        if rule is not None and rule.file_type:
            return get_file_type(rule.file_type)
        file_type = detect_file_type(path)
        if file_type is None:
            raise UnsupportedFileType(path, f"unsupported file type for '{path}'")
        return file_type

    def evaluate_unit(
        self,
        unit: DocumentationUnit,
        rule: ConventionRule,
        path: str,
    ) -> list[Violation]:
        """Check one unit: one violation per missing tag, one for an oversized header."""
        violations: list[Violation] = []

        if unit.is_header:
            if rule.max_header_lines is not None and unit.line_count > rule.max_header_lines:
                violations.append(
                    Violation(
                        file=path,
                        line=unit.start_line,
                        rule_id=rule.id,
                        severity=rule.severity,
                        message=(
                            f"header block is {unit.line_count} lines, "
                            f"exceeds maximum of {rule.max_header_lines}"
                        ),
                    )
                )
            tag_sets = [("file header", rule.required_tags)]
            if unit.declaration is not None and rule.declaration_tags:
                tag_sets.append((f"documentation for '{unit.declaration}'", rule.declaration_tags))
        else:
            tag_sets = [(f"documentation for '{unit.declaration}'", rule.declaration_tags)]

        for where, tags in tag_sets:
            for tag in tags:
                if tag_present(tag, unit, rule.tag_match):
                    continue
                violations.append(
                    Violation(
                        file=path,
                        line=unit.start_line,
                        rule_id=rule.id,
                        severity=rule.severity,
                        message=f"missing required tag '{tag}' in {where}",
                    )
                )
        return violations

    def check_source(self, path: str, text: str, file_type: FileType | None = None) -> list[Violation]:
        """
        Run the extractor and evaluate every unit of one file.

        Files without a header block are judged against an empty header at
        line 1, so each required tag is reported as missing.

        Raises:
            UnsupportedFileType: the file type cannot be resolved.
        """
        rule = self.select_rule(path)
        if file_type is None:
            file_type = self.resolve_file_type(path, rule)
        if rule is None:
            logger.debug(f"No rule matches {path}")
            return []

        violations: list[Violation] = []
        saw_header = False
        for unit in extract_units(text, file_type):
            saw_header = saw_header or unit.is_header
            violations.extend(self.evaluate_unit(unit, rule, path))

        if not saw_header:
            header_violations = self.evaluate_unit(DocumentationUnit.empty_header(), rule, path)
            violations = header_violations + violations

        logger.debug(f"{path}: rule '{rule.id}' produced {len(violations)} violations")
        return violations
