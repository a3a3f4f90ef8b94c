"""
Tests for the command line — exit codes and report output.
"""

import json

import pytest

from conventlint.cli import main, read_commit_input

CONFIG = """
rules:
  - id: go-header
    pattern: "*.go"
    requiredTags: [PURPOSE, WHY]
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "rules.yaml").write_text(CONFIG)
    return tmp_path


def test_check_files_clean(project, capsys):
    (project / "ok.go").write_text("// PURPOSE: x\n// WHY: y\npackage ok\n")
    assert main(["check-files", "ok.go", "--config", "rules.yaml"]) == 0
    assert capsys.readouterr().out == ""


def test_check_files_cache_go_scenario(project, capsys):
    (project / "cache.go").write_text(
        "// Package cache implements TTL-based object storage\npackage cache\n"
    )
    code = main(["check-files", "cache.go", "--config", "rules.yaml", "--format", "json"])
    records = json.loads(capsys.readouterr().out)

    assert code == 1
    assert [r["message"] for r in records] == [
        "missing required tag 'PURPOSE' in file header",
        "missing required tag 'WHY' in file header",
    ]
    assert records[0] == {
        "file": "cache.go",
        "line": 1,
        "ruleId": "go-header",
        "severity": "error",
        "message": "missing required tag 'PURPOSE' in file header",
    }


def test_check_files_text_output_to_file(project):
    (project / "bare.go").write_text("package bare\n")
    assert main(["check-files", ".", "--config", "rules.yaml", "--output", "report.txt"]) == 1
    lines = (project / "report.txt").read_text().splitlines()
    assert lines[0] == "bare.go:1: error: missing required tag 'PURPOSE' in file header [go-header]"


def test_bad_config_exits_2(project, capsys):
    (project / "bad.yaml").write_text("rules:\n  - requiredTags: [PURPOSE]\n")
    (project / "ok.go").write_text("package ok\n")
    assert main(["check-files", "ok.go", "--config", "bad.yaml"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("conventlint: ConfigParseError:")
    assert "Traceback" not in captured.err


def test_missing_config_exits_2(project):
    assert main(["check-commit", "feat: x", "--config", "nope.yaml"]) == 2


def test_check_commit_inline(project, capsys):
    assert main(["check-commit", "feat(auth): add SMS 2FA", "--config", "rules.yaml"]) == 0
    assert capsys.readouterr().out == ""


def test_check_commit_breaking_without_body(project, capsys):
    assert main(["check-commit", "feat(db)!: drop PostgreSQL 11 support"]) == 1
    assert "MissingBreakingRationale" in capsys.readouterr().out


def test_check_commit_from_file(project):
    message = project / "COMMIT_EDITMSG"
    message.write_text(
        "feat(db)!: drop PostgreSQL 11 support\n\nBREAKING CHANGE: Requires PG >= 13.2\n"
    )
    assert main(["check-commit", str(message)]) == 0


def test_check_commit_warning_only_exits_0(project, capsys):
    assert main(["check-commit", "docs: " + "w" * 60, "--format", "json"]) == 0
    records = json.loads(capsys.readouterr().out)
    assert [r["ruleId"] for r in records] == ["SubjectTooLong"]


def test_check_commit_from_stdin(project, monkeypatch):
    import io

    monkeypatch.setattr("sys.stdin", io.StringIO("fix: handle empty input\n"))
    assert read_commit_input("-") == ("fix: handle empty input\n", "<commit-message>")


def test_usage_errors_exit_2(project):
    with pytest.raises(SystemExit) as exc_info:
        main(["check-files"])
    assert exc_info.value.code == 2

    with pytest.raises(SystemExit) as exc_info:
        main(["check-files", ".", "--workers", "0"])
    assert exc_info.value.code == 2
