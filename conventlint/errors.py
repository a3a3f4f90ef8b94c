"""
Error kinds and exceptions.

Fatal errors (bad configuration, unreadable commit input) abort the run with
exit code 2. Per-file errors are converted into violations so one bad file
never stops the others from being checked.
"""

from __future__ import annotations

from enum import Enum

from conventlint.models.report_models import Severity, Violation

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_USAGE = 2


class ErrorKind(str, Enum):
    UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
    FILE_TOO_LARGE = "FileTooLarge"
    READ_TIMEOUT = "ReadTimeout"
    FILE_READ_ERROR = "FileReadError"
    INTERNAL_ERROR = "InternalError"
    CONFIG_PARSE_ERROR = "ConfigParseError"
    MALFORMED_COMMIT_HEADER = "MalformedCommitHeader"
    UNKNOWN_COMMIT_TYPE = "UnknownCommitType"
    MISSING_BREAKING_RATIONALE = "MissingBreakingRationale"
    SUBJECT_TOO_LONG = "SubjectTooLong"
    MISSING_BODY_SEPARATOR = "MissingBodySeparator"


class ConventionLintError(Exception):
    """Base class for all conventlint errors."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    exit_code: int = EXIT_USAGE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigParseError(ConventionLintError):
    """The rule set is malformed; no checking may start."""

    kind = ErrorKind.CONFIG_PARSE_ERROR


class InputError(ConventionLintError):
    """A commit message or other direct input could not be read."""

    kind = ErrorKind.FILE_READ_ERROR


class FileCheckError(ConventionLintError):
    """A failure scoped to a single file."""

    default_severity = Severity.ERROR

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path

    def to_violation(self, severity: Severity | None = None) -> Violation:
        return Violation(
            file=self.path,
            line=0,
            rule_id=self.kind.value,
            severity=severity or self.default_severity,
            message=self.message,
        )


class UnsupportedFileType(FileCheckError):
    kind = ErrorKind.UNSUPPORTED_FILE_TYPE
    default_severity = Severity.WARNING


class FileTooLarge(FileCheckError):
    kind = ErrorKind.FILE_TOO_LARGE


class ReadTimeout(FileCheckError):
    kind = ErrorKind.READ_TIMEOUT


class FileReadError(FileCheckError):
    kind = ErrorKind.FILE_READ_ERROR


class MalformedCommitHeader(ConventionLintError):
    """The first line does not follow `type(scope)!: subject`."""

    kind = ErrorKind.MALFORMED_COMMIT_HEADER
