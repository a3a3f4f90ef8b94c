"""
Rule Loader — Reads and validates the convention rule set.

The rule set is a YAML (or JSON) document validated into a frozen RuleSet.
Any problem raises ConfigParseError before a single file is checked.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from conventlint.config import settings
from conventlint.core.filetypes import FILE_TYPES
from conventlint.errors import ConfigParseError
from conventlint.models.rule_models import RuleSet

logger = logging.getLogger("conventlint.loader")

DEFAULT_CONFIG_NAMES = (".conventlint.yaml", ".conventlint.yml")

# Used when no configuration file is found
DEFAULT_RULES: dict[str, Any] = {
    "version": 1,
    "rules": [
        {"id": "go-header", "pattern": "*.go", "requiredTags": ["PURPOSE", "WHY"]},
        {"id": "shell-header", "pattern": "*.sh", "requiredTags": ["PURPOSE", "USAGE"]},
        {"id": "terraform-header", "pattern": "*.tf", "requiredTags": ["PURPOSE", "SCOPE"]},
        {"id": "vue-header", "pattern": "*.vue", "requiredTags": ["PURPOSE"]},
        {"id": "makefile-header", "pattern": "Makefile", "requiredTags": ["PURPOSE"]},
        {"id": "justfile-header", "pattern": "justfile", "requiredTags": ["PURPOSE"]},
        {"id": "taskfile-header", "pattern": "Taskfile.yml", "requiredTags": ["PURPOSE"]},
    ],
}


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_rule_set(data: Any, source: str = "<config>") -> RuleSet:
    """
    Validate a decoded configuration document.

    Raises:
        ConfigParseError: wrong shape, unknown keys, unknown file types.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"{source}: top level must be a mapping")

    try:
        rule_set = RuleSet.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(f"{source}: {_describe(e)}") from e

    referenced = [r.file_type for r in rule_set.rules if r.file_type]
    referenced.extend(rule_set.file_types.values())
    unknown = sorted({name for name in referenced if name not in FILE_TYPES})
    if unknown:
        raise ConfigParseError(f"{source}: unknown file type(s): {', '.join(unknown)}")

    return rule_set


def load_rule_set(path: str | Path) -> RuleSet:
    """Read and validate a rule set file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigParseError(f"cannot read config '{path}': {e.strerror or e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"{path}: invalid YAML: {e}") from e

    rule_set = parse_rule_set(data, str(path))
    logger.info(f"Loaded {len(rule_set.rules)} rules from {path}")
    return rule_set


def default_rule_set() -> RuleSet:
    return parse_rule_set(DEFAULT_RULES, "<built-in defaults>")


def resolve_rule_set(config_path: str | None = None, cwd: Path | None = None) -> RuleSet:
    """
    Locate and load the rule set for a run.

    Lookup: explicit path, CONVENTLINT_CONFIG_PATH, a .conventlint.y(a)ml in
    the working directory, then the built-in defaults.
    """
    explicit = config_path or settings.config_path
    if explicit:
        return load_rule_set(explicit)

    base = cwd or Path.cwd()
    for name in DEFAULT_CONFIG_NAMES:
        candidate = base / name
        if candidate.is_file():
            return load_rule_set(candidate)

    logger.info("No configuration file found, using built-in defaults")
    return default_rule_set()
