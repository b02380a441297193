"""Parsing of go.mod and go.work files."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import NamedTuple

_MOD_BLOCKS = frozenset({"require", "exclude", "replace", "retract", "godebug", "tool", "ignore"})
_MOD_DIRECTIVES = _MOD_BLOCKS | {"module", "go", "toolchain"}
_WORK_BLOCKS = frozenset({"use", "replace", "godebug"})
_WORK_DIRECTIVES = _WORK_BLOCKS | {"go", "toolchain"}

_GO_VERSION_RE = re.compile(
    r"^[1-9][0-9]*\.(0|[1-9][0-9]*)(\.(0|[1-9][0-9]*))?((rc|beta)[1-9][0-9]*)?$"
)

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r"}
_PARENS = ("(", ")")


class ModfileSyntaxError(ValueError):
    """A go.mod or go.work file could not be parsed."""

    def __init__(self, lineno: int, message: str) -> None:
        super().__init__(f"{lineno}: {message}")
        self.lineno = lineno
        self.message = message


@dataclass(frozen=True)
class Requirement:
    """One module requirement of a go.mod file."""

    path: str
    version: str
    indirect: bool = False


@dataclass
class ModFile:
    """The parts of a go.mod file that matter here."""

    module: str | None = None
    go: str | None = None
    requires: list[Requirement] = field(default_factory=list)


@dataclass
class WorkFile:
    """The parts of a go.work file that matter here."""

    go: str | None = None
    uses: list[str] = field(default_factory=list)


class _Statement(NamedTuple):
    lineno: int
    verb: str
    args: list[str]
    comment: str


def _read_quoted(line: str, i: int, lineno: int) -> tuple[str, int]:
    out: list[str] = []
    while i < len(line):
        c = line[i]
        if c == '"':
            return "".join(out), i + 1
        if c == "\\":
            if i + 1 >= len(line) or line[i + 1] not in _ESCAPES:
                raise ModfileSyntaxError(lineno, "invalid escape in quoted string")
            out.append(_ESCAPES[line[i + 1]])
            i += 2
            continue
        out.append(c)
        i += 1
    raise ModfileSyntaxError(lineno, "unterminated quoted string")


def _tokenize(line: str, lineno: int) -> tuple[list[str], str]:
    tokens: list[str] = []
    i, n = 0, len(line)
    while i < n:
        c = line[i]
        if c.isspace():
            i += 1
            continue
        if line.startswith("//", i):
            return tokens, line[i + 2 :].strip()
        if c in _PARENS:
            tokens.append(c)
            i += 1
            continue
        if c == '"':
            value, i = _read_quoted(line, i + 1, lineno)
            tokens.append(value)
            continue
        if c == "`":
            end = line.find("`", i + 1)
            if end < 0:
                raise ModfileSyntaxError(lineno, "unterminated raw string")
            tokens.append(line[i + 1 : end])
            i = end + 1
            continue
        start = i
        while (
            i < n
            and not line[i].isspace()
            and line[i] not in '()"`'
            and not line.startswith("//", i)
        ):
            i += 1
        tokens.append(line[start:i])
    return tokens, ""


def _statements(text: str, block_verbs: frozenset[str]) -> Iterator[_Statement]:
    block: str | None = None
    block_start = 0
    for lineno, raw in enumerate(text.splitlines(), 1):
        tokens, comment = _tokenize(raw, lineno)
        if block is not None:
            if tokens == [")"]:
                block = None
                continue
            if not tokens:
                continue
            if any(t in _PARENS for t in tokens):
                raise ModfileSyntaxError(lineno, "unexpected parenthesis in block")
            yield _Statement(lineno, block, tokens, comment)
            continue
        if not tokens:
            continue
        verb, args = tokens[0], tokens[1:]
        if args in (["("], ["(", ")"]):
            if verb not in block_verbs:
                raise ModfileSyntaxError(lineno, f"unknown block type: {verb}")
            if args == ["("]:
                block, block_start = verb, lineno
            continue
        if any(t in _PARENS for t in tokens):
            raise ModfileSyntaxError(lineno, "unexpected parenthesis")
        yield _Statement(lineno, verb, args, comment)
    if block is not None:
        raise ModfileSyntaxError(block_start, f"unterminated {block} block")


def _decode(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ModfileSyntaxError(0, f"invalid UTF-8: {exc}") from exc


def _expect_args(st: _Statement, count: int, usage: str) -> None:
    if len(st.args) != count:
        raise ModfileSyntaxError(st.lineno, usage)


def _parse_go(st: _Statement, current: str | None) -> str:
    if current is not None:
        raise ModfileSyntaxError(st.lineno, "repeated go statement")
    _expect_args(st, 1, "go directive expects exactly one argument")
    version = st.args[0]
    if not _GO_VERSION_RE.match(version):
        raise ModfileSyntaxError(st.lineno, f"invalid go version '{version}'")
    return version


def _is_indirect(comment: str) -> bool:
    return comment == "indirect" or comment.startswith("indirect;")


def parse_mod(data: bytes | str) -> ModFile:
    """Parse the contents of a go.mod file."""
    mod = ModFile()
    for st in _statements(_decode(data), _MOD_BLOCKS):
        if st.verb == "module":
            if mod.module is not None:
                raise ModfileSyntaxError(st.lineno, "repeated module statement")
            _expect_args(st, 1, "usage: module module/path")
            mod.module = st.args[0]
        elif st.verb == "go":
            mod.go = _parse_go(st, mod.go)
        elif st.verb == "require":
            _expect_args(st, 2, "usage: require module/path v1.2.3")
            mod.requires.append(
                Requirement(st.args[0], st.args[1], _is_indirect(st.comment))
            )
        elif st.verb not in _MOD_DIRECTIVES:
            raise ModfileSyntaxError(st.lineno, f"unknown directive: {st.verb}")
    return mod


def parse_work(data: bytes | str) -> WorkFile:
    """Parse the contents of a go.work file."""
    work = WorkFile()
    for st in _statements(_decode(data), _WORK_BLOCKS):
        if st.verb == "go":
            work.go = _parse_go(st, work.go)
        elif st.verb == "use":
            _expect_args(st, 1, "usage: use local/dir")
            work.uses.append(st.args[0])
        elif st.verb not in _WORK_DIRECTIVES:
            raise ModfileSyntaxError(st.lineno, f"unknown directive: {st.verb}")
    return work