"""
Commit Message Validator — Conventional-commit grammar checks.

Header grammar: <type>(<scope>)!: <subject>, scope and ! optional, then an
optional body after a blank line. Validation is a pure function of the
message text and the commit policy.
"""

from __future__ import annotations

import re

from conventlint.errors import ErrorKind, MalformedCommitHeader
from conventlint.models.commit_models import CommitMessage
from conventlint.models.report_models import Severity, Violation
from conventlint.models.rule_models import CommitPolicy

DEFAULT_SOURCE = "<commit-message>"

HEADER_RE = re.compile(
    r"^(?P<type>[A-Za-z][\w-]*)"
    r"(?:\((?P<scope>[^()\r\n]+)\))?"
    r"(?P<breaking>!)?"
    r":[ \t]+"
    r"(?P<subject>\S.*)$"
)
BREAKING_RE = re.compile(r"^BREAKING[ -]CHANGE:")
SCISSORS_RE = re.compile(r"^# -+ >8 -+$")

# Generated headers that are accepted as-is
SKIP_RE = re.compile(r"^(?:Merge (?:branch|pull request|remote-tracking branch|tag)\b|(?:fixup|squash|amend)! )")


def _clean_lines(text: str) -> list[tuple[int, str]]:
    """Drop git comment lines and the scissors section; keep original line numbers."""
    kept: list[tuple[int, str]] = []
    for number, line in enumerate(text.replace("\r\n", "\n").split("\n"), start=1):
        if SCISSORS_RE.match(line.strip()):
            break
        if line.startswith("#"):
            continue
        kept.append((number, line.rstrip()))
    while kept and not kept[0][1].strip():
        kept.pop(0)
    while kept and not kept[-1][1].strip():
        kept.pop()
    return kept


def _decompose(lines: list[tuple[int, str]]) -> CommitMessage:
    if not lines:
        raise MalformedCommitHeader("commit message is empty")

    header = lines[0][1].strip()
    match = HEADER_RE.match(header)
    if not match:
        raise MalformedCommitHeader(
            f"header '{header}' does not match 'type(scope)!: subject'"
        )

    rest = lines[1:]
    has_separator = not rest or not rest[0][1].strip()
    while rest and not rest[0][1].strip():
        rest = rest[1:]
    body = "\n".join(line for _, line in rest) if rest else None

    breaking = bool(match.group("breaking")) or any(
        BREAKING_RE.match(line) for _, line in rest
    )

    return CommitMessage(
        header=header,
        type=match.group("type"),
        scope=match.group("scope"),
        breaking=breaking,
        subject=match.group("subject").strip(),
        body=body,
        body_start_line=rest[0][0] if rest else 0,
        has_separator=has_separator,
    )


def parse_commit_message(text: str) -> CommitMessage:
    """
    Split a commit message into its conventional-commit parts.

    Raises:
        MalformedCommitHeader: empty message or header outside the grammar.
    """
    return _decompose(_clean_lines(text))


def validate_commit(
    text: str,
    policy: CommitPolicy | None = None,
    source: str = DEFAULT_SOURCE,
) -> list[Violation]:
    """
    Validate one commit message.

    Args:
        text: Raw commit message, as written to COMMIT_EDITMSG or given inline.
        policy: Allowed types and limits; the conventional defaults when None.
        source: Label reported as the violation file.

    Returns:
        Violations in discovery order. Empty when the message conforms.
    """
    policy = policy or CommitPolicy()
    lines = _clean_lines(text)
    header_line = lines[0][0] if lines else 1

    def violation(line: int, kind: ErrorKind, severity: Severity, message: str) -> Violation:
        return Violation(
            file=source, line=line, rule_id=kind.value, severity=severity, message=message
        )

    if lines and SKIP_RE.match(lines[0][1]):
        return []

    try:
        commit = _decompose(lines)
    except MalformedCommitHeader as e:
        return [violation(header_line, e.kind, Severity.ERROR, e.message)]

    violations: list[Violation] = []

    if commit.type not in policy.types and not policy.open_types:
        violations.append(
            violation(
                header_line,
                ErrorKind.UNKNOWN_COMMIT_TYPE,
                Severity.ERROR,
                f"unknown commit type '{commit.type}'; expected one of: "
                f"{', '.join(sorted(policy.types))}",
            )
        )

    if len(commit.subject) > policy.max_subject_length:
        violations.append(
            violation(
                header_line,
                ErrorKind.SUBJECT_TOO_LONG,
                Severity.WARNING,
                f"subject is {len(commit.subject)} characters, "
                f"limit is {policy.max_subject_length}",
            )
        )

    if policy.require_body_separator and commit.body is not None and not commit.has_separator:
        violations.append(
            violation(
                commit.body_start_line,
                ErrorKind.MISSING_BODY_SEPARATOR,
                Severity.WARNING,
                "body must be separated from the header by a blank line",
            )
        )

    if commit.breaking and not commit.has_rationale:
        violations.append(
            violation(
                header_line,
                ErrorKind.MISSING_BREAKING_RATIONALE,
                Severity.ERROR,
                "breaking change needs a body explaining the rationale",
            )
        )

    return violations
