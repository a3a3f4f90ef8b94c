"""
Comment Styles — Registry of comment syntaxes.

A comment style decides which source lines are comment-only lines and how to
strip the comment markers from them. Styles are looked up by name, so new
languages only need a registration here and a file type entry.
"""

from __future__ import annotations

from typing import Protocol, Sequence


class CommentStyle(Protocol):
    def classify(self, lines: Sequence[str]) -> list[bool]:
        """Return one flag per line, True when the line is comment-only."""
        ...

    def strip(self, line: str) -> str:
        """Return the comment text of a comment line without its markers."""
        ...


class LineCommentStyle:
    """Comments introduced by a prefix and running to end of line (`//`, `#`)."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def classify(self, lines: Sequence[str]) -> list[bool]:
        return [line.lstrip().startswith(self.prefix) for line in lines]

    def strip(self, line: str) -> str:
        text = line.strip()
        if not text.startswith(self.prefix):
            return text
        # `///` and `##` banners collapse to their text
        return text[len(self.prefix) :].lstrip(self.prefix[0]).strip()

    def __repr__(self) -> str:
        return f"LineCommentStyle({self.prefix!r})"


class BlockCommentStyle:
    """Comments delimited by open/close markers (`/* */`, `<!-- -->`)."""

    def __init__(self, open_marker: str, close_marker: str, continuation: str = "") -> None:
        self.open_marker = open_marker
        self.close_marker = close_marker
        self.continuation = continuation

    def classify(self, lines: Sequence[str]) -> list[bool]:
        flags: list[bool] = []
        in_block = False
        for line in lines:
            text = line.strip()
            if in_block:
                flags.append(True)
                if self.close_marker in text:
                    in_block = False
                continue
            if not text.startswith(self.open_marker):
                flags.append(False)
                continue
            rest = text[len(self.open_marker) :]
            if self.close_marker not in rest:
                flags.append(True)
                in_block = True
                continue
            # Code after the close marker makes this a code line
            trailing = rest.split(self.close_marker, 1)[1].strip()
            flags.append(not trailing)
        return flags

    def strip(self, line: str) -> str:
        text = line.strip()
        if text.startswith(self.open_marker):
            text = text[len(self.open_marker) :]
        if text.endswith(self.close_marker):
            text = text[: -len(self.close_marker)]
        text = text.strip()
        if self.continuation and text.startswith(self.continuation):
            text = text[len(self.continuation) :]
        return text.strip()

    def __repr__(self) -> str:
        return f"BlockCommentStyle({self.open_marker!r}, {self.close_marker!r})"


class CompositeCommentStyle:
    """Several styles accepted in the same file, e.g. `//` and `/* */` in Go."""

    def __init__(self, *styles: CommentStyle) -> None:
        self.styles = styles

    def classify(self, lines: Sequence[str]) -> list[bool]:
        per_style = [style.classify(lines) for style in self.styles]
        return [any(flags) for flags in zip(*per_style)] if per_style else [False] * len(lines)

    def strip(self, line: str) -> str:
        for style in self.styles:
            if style.classify([line])[0]:
                return style.strip(line)
        # continuation line inside a block comment
        for style in self.styles:
            if isinstance(style, BlockCommentStyle):
                return style.strip(line)
        return line.strip()

    def __repr__(self) -> str:
        return f"CompositeCommentStyle{self.styles!r}"


_SLASH = LineCommentStyle("//")
_C_BLOCK = BlockCommentStyle("/*", "*/", continuation="*")

# Registry of comment styles by name
COMMENT_STYLES: dict[str, CommentStyle] = {
    "hash": LineCommentStyle("#"),
    "slash": _SLASH,
    "dash": LineCommentStyle("--"),
    "semicolon": LineCommentStyle(";"),
    "c-block": _C_BLOCK,
    "c-family": CompositeCommentStyle(_SLASH, _C_BLOCK),
    "html": BlockCommentStyle("<!--", "-->"),
    "hcl": CompositeCommentStyle(LineCommentStyle("#"), _SLASH, _C_BLOCK),
}


def register_comment_style(name: str, style: CommentStyle) -> None:
    """Add or replace a comment style."""
    COMMENT_STYLES[name] = style


def get_comment_style(name: str) -> CommentStyle:
    if name not in COMMENT_STYLES:
        raise KeyError(f"Unknown comment style: {name}")
    return COMMENT_STYLES[name]
