"""
File Types — Registry mapping file names to comment syntax and declarations.

What counts as a "declaration" differs per language, so every file type
carries its own declaration finder: a callable that maps 0-based line
indexes of top-level declarations to their names.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Sequence

from conventlint.core.comment_styles import CommentStyle, get_comment_style
from conventlint.core.parser import python_declarations

DeclarationFinder = Callable[[Sequence[str]], dict[int, str]]


class RegexDeclarations:
    """Declaration finder driven by anchored regular expressions.

    The first pattern that matches a line wins. The declaration name is the
    non-empty named groups joined with '.', or the matched text when the
    pattern has none.
    """

    def __init__(self, *patterns: str) -> None:
        self.patterns = [re.compile(p) for p in patterns]

    def __call__(self, lines: Sequence[str]) -> dict[int, str]:
        found: dict[int, str] = {}
        for index, line in enumerate(lines):
            for pattern in self.patterns:
                match = pattern.match(line)
                if match:
                    parts = [v for v in match.groupdict().values() if v]
                    found[index] = ".".join(parts) or match.group(0).strip()
                    break
        return found


def taskfile_declarations(lines: Sequence[str]) -> dict[int, str]:
    """Task keys directly under the top-level `tasks:` mapping."""
    found: dict[int, str] = {}
    in_tasks = False
    indent: int | None = None
    key_re = re.compile(r"^(?P<indent>\s+)(?P<name>[\w:.-]+):\s*(?:#.*)?$")
    for index, line in enumerate(lines):
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if not line[0].isspace():
            in_tasks = line.rstrip().startswith("tasks:")
            indent = None
            continue
        if not in_tasks:
            continue
        match = key_re.match(line)
        if not match:
            continue
        width = len(match.group("indent"))
        if indent is None:
            indent = width
        if width == indent:
            found[index] = match.group("name")
    return found


@dataclass(frozen=True)
class FileType:
    """A supported kind of source file."""

    name: str
    comment_style: str
    declarations: DeclarationFinder
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = ()

    @property
    def style(self) -> CommentStyle:
        return get_comment_style(self.comment_style)

    def matches(self, path: str) -> bool:
        basename = PurePosixPath(path).name
        if any(fnmatch.fnmatchcase(basename, pattern) for pattern in self.filenames):
            return True
        return basename.lower().endswith(self.extensions) if self.extensions else False


_JS_DECLARATIONS = RegexDeclarations(
    r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?function\*?\s*(?P<name>[\w$]+)",
    r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(?P<name>[\w$]+)",
    r"^(?:export\s+)?(?:declare\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)",
    r"^(?:export\s+)?(?:declare\s+)?(?:interface|type|enum)\s+(?P<name>[\w$]+)",
)

_COMPONENT_DECLARATIONS = RegexDeclarations(r"^<(?P<name>template|script|style)\b")

# Registry of file types, in lookup order
FILE_TYPES: dict[str, FileType] = {}


def register_file_type(file_type: FileType) -> None:
    """Add or replace a file type."""
    FILE_TYPES[file_type.name] = file_type


for _file_type in (
    FileType(
        name="go",
        comment_style="c-family",
        extensions=(".go",),
        declarations=RegexDeclarations(
            r"^package\s+(?P<name>\w+)",
            r"^func\s+(?:\([^)]*\)\s*)?(?P<name>\w+)",
            r"^(?P<name>var|const|type)\s*\(",
            r"^(?:var|const|type)\s+(?P<name>\w+)",
        ),
    ),
    FileType(
        name="shell",
        comment_style="hash",
        extensions=(".sh", ".bash", ".zsh", ".ksh"),
        declarations=RegexDeclarations(
            r"^function\s+(?P<name>[A-Za-z_][\w:.-]*)",
            r"^(?P<name>[A-Za-z_][\w:.-]*)\s*\(\)",
        ),
    ),
    FileType(
        name="terraform",
        comment_style="hcl",
        extensions=(".tf", ".tfvars", ".hcl"),
        declarations=RegexDeclarations(
            r'^(?:resource|data)\s+"(?P<type>[^"]+)"\s+"(?P<label>[^"]+)"',
            r'^(?:module|variable|output|provider)\s+"(?P<label>[^"]+)"',
            r"^(?P<label>locals|terraform)\s*\{",
        ),
    ),
    FileType(
        name="python",
        comment_style="hash",
        extensions=(".py", ".pyi"),
        declarations=python_declarations,
    ),
    FileType(
        name="javascript",
        comment_style="c-family",
        extensions=(".js", ".jsx", ".mjs", ".cjs"),
        declarations=_JS_DECLARATIONS,
    ),
    FileType(
        name="typescript",
        comment_style="c-family",
        extensions=(".ts", ".tsx", ".mts", ".cts"),
        declarations=_JS_DECLARATIONS,
    ),
    FileType(
        name="vue",
        comment_style="html",
        extensions=(".vue",),
        declarations=_COMPONENT_DECLARATIONS,
    ),
    FileType(
        name="svelte",
        comment_style="html",
        extensions=(".svelte",),
        declarations=_COMPONENT_DECLARATIONS,
    ),
    FileType(
        name="html",
        comment_style="html",
        extensions=(".html", ".htm"),
        declarations=RegexDeclarations(
            r"(?i)^<(?P<name>html|head|body|template|script|style)\b"
        ),
    ),
    FileType(
        name="makefile",
        comment_style="hash",
        extensions=(".mk",),
        filenames=("Makefile", "makefile", "GNUmakefile"),
        declarations=RegexDeclarations(
            r"^\.PHONY\s*:\s*(?P<name>[\w./%-]+)",
            r"^(?P<name>[A-Za-z0-9_/%-][\w./%-]*)\s*:(?!:?=)",
        ),
    ),
    FileType(
        name="justfile",
        comment_style="hash",
        extensions=(".just",),
        filenames=("justfile", "Justfile", ".justfile"),
        declarations=RegexDeclarations(
            r"^@?(?P<name>[A-Za-z_][\w-]*)(?:\s+[^:=]*)?:(?!=)",
        ),
    ),
    FileType(
        name="taskfile",
        comment_style="hash",
        filenames=("Taskfile.yml", "Taskfile.yaml", "taskfile.yml", "taskfile.yaml"),
        declarations=taskfile_declarations,
    ),
    FileType(
        name="yaml",
        comment_style="hash",
        extensions=(".yml", ".yaml"),
        declarations=RegexDeclarations(r"^(?P<name>[A-Za-z_][\w.-]*):"),
    ),
    FileType(
        name="dockerfile",
        comment_style="hash",
        extensions=(".dockerfile",),
        filenames=("Dockerfile", "Dockerfile.*", "Containerfile"),
        declarations=RegexDeclarations(
            r"(?i)^FROM\s+\S+\s+AS\s+(?P<name>[\w.-]+)",
            r"(?i)^FROM\s+\S+",
        ),
    ),
):
    register_file_type(_file_type)


def get_file_type(name: str) -> FileType:
    if name not in FILE_TYPES:
        raise KeyError(f"Unknown file type: {name}")
    return FILE_TYPES[name]


def detect_file_type(path: str) -> FileType | None:
    """Find the registered file type for a path by file name, then extension."""
    basename = PurePosixPath(path).name
    for file_type in FILE_TYPES.values():
        if any(fnmatch.fnmatchcase(basename, p) for p in file_type.filenames):
            return file_type
    for file_type in FILE_TYPES.values():
        if file_type.matches(path):
            return file_type
    return None
