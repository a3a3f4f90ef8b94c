"""
Sample sources and a small rule set (a Go rule plus a prefix-mode rule for
scripts/) used by the engine, extractor and worker tests.
"""

import pytest


@pytest.fixture
def go_source():
    """Go file whose header names the package but carries no tags."""
    return '''// Package cache implements TTL-based object storage
package cache

import "time"

// Get returns a cached value.
// WHY: callers need a fast path before hitting the store.
func Get(key string) (string, bool) {
	return "", false
}

// stray comment that documents nothing

type Entry struct {
	Value   string
	Expires time.Time
}
'''


@pytest.fixture
def tagged_shell_source():
    """Shell script with a complete header and a documented function."""
    return '''#!/usr/bin/env bash
# PURPOSE: rotate application logs
# USAGE: rotate.sh <dir>
# WHY: disks fill up on long-running hosts

set -euo pipefail

# PURPOSE: compress one file
compress() {
  gzip "$1"
}
'''


@pytest.fixture
def rule_config():
    """Raw configuration document as it would come out of YAML."""
    return {
        "version": 1,
        "rules": [
            {"id": "go", "pattern": "*.go", "requiredTags": ["PURPOSE", "WHY"]},
            {
                "id": "scripts",
                "pattern": "*.sh",
                "requiredTags": ["PURPOSE", "USAGE"],
                "declarationTags": ["PURPOSE"],
                "maxHeaderLines": 5,
                "tagMatch": "prefix",
            },
        ],
    }


@pytest.fixture
def rule_set(rule_config):
    from conventlint.core.rule_loader import parse_rule_set

    return parse_rule_set(rule_config)
