"""
Tests for comment styles — line classification and marker stripping.
"""

import pytest

from conventlint.core.comment_styles import (
    COMMENT_STYLES,
    BlockCommentStyle,
    LineCommentStyle,
    get_comment_style,
    register_comment_style,
)


def test_line_style_classifies_indented_comments():
    style = LineCommentStyle("#")
    flags = style.classify(["# top", "  # indented", "echo hi", ""])
    assert flags == [True, True, False, False]


def test_line_style_strips_repeated_markers():
    style = LineCommentStyle("//")
    assert style.strip("// PURPOSE: cache") == "PURPOSE: cache"
    assert style.strip("/// doc comment") == "doc comment"
    assert LineCommentStyle("#").strip("## WHY: speed") == "WHY: speed"


def test_block_style_spans_multiple_lines():
    style = BlockCommentStyle("<!--", "-->")
    lines = ["<!--", "PURPOSE: button", "-->", "<template>"]
    assert style.classify(lines) == [True, True, True, False]


def test_block_style_with_trailing_code_is_not_comment():
    style = BlockCommentStyle("/*", "*/")
    assert style.classify(["/* note */ int x = 1;"]) == [False]
    assert style.classify(["/* note */"]) == [True]


def test_c_family_strips_block_continuation():
    style = get_comment_style("c-family")
    lines = ["/**", " * PURPOSE: parse input", " */", "// WHY: speed"]
    assert style.classify(lines) == [True, True, True, True]
    assert [style.strip(line) for line in lines] == ["", "PURPOSE: parse input", "", "WHY: speed"]


def test_register_custom_style():
    register_comment_style("percent", LineCommentStyle("%"))
    try:
        assert get_comment_style("percent").classify(["% tex"]) == [True]
    finally:
        COMMENT_STYLES.pop("percent")


def test_unknown_style_raises():
    with pytest.raises(KeyError):
        get_comment_style("nope")
