"""
Rule Set Data Models — Convention rules, commit policy and the loaded rule set.

Field names are snake_case in Python and camelCase in the configuration file.
All models are frozen: a rule set is built once per run and shared read-only.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from conventlint.models.report_models import Severity


class TagMatch(str, Enum):
    SUBSTRING = "substring"
    PREFIX = "prefix"


DEFAULT_COMMIT_TYPES: dict[str, str] = {
    "build": "Changes that affect the build system or external dependencies",
    "chore": "Maintenance that touches neither source nor tests",
    "ci": "Changes to CI configuration files and scripts",
    "docs": "Documentation only changes",
    "feat": "A new feature",
    "fix": "A bug fix",
    "perf": "A code change that improves performance",
    "refactor": "A code change that neither fixes a bug nor adds a feature",
    "revert": "Reverts a previous commit",
    "style": "Formatting changes that do not affect meaning",
    "test": "Adding missing tests or correcting existing tests",
}


def check_glob(pattern: str) -> str:
    """Reject globs that can never match a relative POSIX path."""
    if not pattern.strip():
        raise ValueError("glob must not be empty")
    if pattern.startswith("/") or "\\" in pattern:
        raise ValueError(f"invalid glob '{pattern}': use relative POSIX paths")
    if pattern.count("[") != pattern.count("]"):
        raise ValueError(f"invalid glob '{pattern}': unbalanced brackets")
    return pattern


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="forbid",
    )


class ConventionRule(_FrozenModel):
    """Which tags are required for files matching a glob pattern."""

    id: str = Field(default="", description="Rule id reported in violations; defaults to the pattern")
    pattern: str = Field(..., min_length=1, description="Glob matched against the file path")
    file_type: str | None = Field(
        default=None, description="Force a registered file type for matching files"
    )
    required_tags: tuple[str, ...] = Field(
        default=(), description="Tags that must appear in the file header block"
    )
    declaration_tags: tuple[str, ...] = Field(
        default=(), description="Tags that must appear in every declaration comment block"
    )
    max_header_lines: int | None = Field(
        default=None, ge=1, description="Maximum number of lines in the header block"
    )
    severity: Severity = Severity.ERROR
    tag_match: TagMatch = TagMatch.SUBSTRING

    @field_validator("pattern")
    @classmethod
    def _valid_pattern(cls, pattern: str) -> str:
        return check_glob(pattern)

    @field_validator("required_tags", "declaration_tags")
    @classmethod
    def _tags_not_blank(cls, tags: tuple[str, ...]) -> tuple[str, ...]:
        cleaned = tuple(t.strip() for t in tags)
        if any(not t for t in cleaned):
            raise ValueError("tag names must not be empty")
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _default_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id") and data.get("pattern"):
            return {**data, "id": data["pattern"]}
        return data


class CommitPolicy(_FrozenModel):
    """Grammar parameters for commit message validation."""

    types: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COMMIT_TYPES))
    open_types: bool = Field(
        default=False, description="Accept commit types that are not listed in `types`"
    )
    max_subject_length: int = Field(default=50, ge=1)
    require_body_separator: bool = Field(
        default=True, description="Warn when the body does not start after a blank line"
    )


class RuleSet(_FrozenModel):
    """The full configuration artifact, in declaration order."""

    version: int = 1
    rules: tuple[ConventionRule, ...] = ()
    commit: CommitPolicy = Field(default_factory=CommitPolicy)
    file_types: dict[str, str] = Field(
        default_factory=dict, description="Glob to file type name overrides"
    )
    exclude: tuple[str, ...] = Field(default=(), description="Globs skipped during directory walks")
    allow_unsupported: bool = Field(
        default=False, description="Silently skip files of unknown type"
    )
    unsupported_severity: Severity = Severity.WARNING

    @field_validator("exclude")
    @classmethod
    def _valid_excludes(cls, globs: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(check_glob(g) for g in globs)

    @field_validator("file_types")
    @classmethod
    def _valid_file_type_globs(cls, mapping: dict[str, str]) -> dict[str, str]:
        for glob in mapping:
            check_glob(glob)
        return mapping

    @model_validator(mode="after")
    def _unique_rule_ids(self) -> RuleSet:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.id in seen:
                raise ValueError(f"duplicate rule id '{rule.id}'")
            seen.add(rule.id)
        return self
