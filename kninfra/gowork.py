"""Discovery of the current Go module and Go workspace modules."""

from __future__ import annotations

import os
import posixpath
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from kninfra.modfile import ModfileSyntaxError, parse_mod, parse_work

ROOT_DIR = "/"


class GoworkError(Exception):
    """Base error for workspace and module discovery."""

    prefix = "go workspace error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}" if detail else self.prefix)


class BugError(GoworkError):
    """Raised when the error is probably a bug."""

    prefix = "probably a bug"


class InvalidGoworkError(GoworkError):
    """Raised when the go.work file is missing or invalid."""

    prefix = "invalid go.work"


class InvalidGomodError(GoworkError):
    """Raised when the go.mod file is missing or invalid."""

    prefix = "invalid go.mod"


@dataclass(frozen=True)
class Module:
    """A Go module: its name and the directory holding it."""

    name: str
    path: str


class FileSystem(Protocol):
    """Read-only file access with paths relative to the file system root."""

    def read(self, name: str) -> bytes: ...

    def is_file(self, name: str) -> bool: ...

    def cwd(self) -> str: ...


class Environment(Protocol):
    """Access to environment variables; missing ones read as empty."""

    def get(self, name: str) -> str: ...


def _wrap(exc: BaseException, as_cls: type[GoworkError]) -> GoworkError:
    if isinstance(exc, as_cls):
        return exc
    return as_cls(str(exc))


def _clean(p: str) -> str:
    return posixpath.normpath(p) if p else "."


def _join(a: str, b: str) -> str:
    return posixpath.normpath(posixpath.join(a, b))


def _dir(p: str) -> str:
    d = posixpath.dirname(p)
    return posixpath.normpath(d) if d else "."


def _find_enclosing_file(
    filesystem: FileSystem, file: str, *drops: Callable[[str], bool]
) -> str:
    try:
        directory = filesystem.cwd()
    except (OSError, GoworkError) as exc:
        raise _wrap(exc, BugError) from exc
    directory = _clean(directory)
    while True:
        candidate = _join(directory, file)
        if filesystem.is_file(candidate):
            return candidate
        parent = _dir(directory)
        if parent == directory:
            return ""
        if any(drop(parent) for drop in drops):
            return ""
        directory = parent


def _find_modfile(filesystem: FileSystem, env: Environment) -> str:
    go111module = env.get("GO111MODULE")
    if go111module not in ("", "auto", "on"):
        raise InvalidGomodError(
            f"unsupported value of GO111MODULE={go111module} "
            "(supported are '', 'auto', 'on')"
        )
    found = _find_enclosing_file(filesystem, "go.mod")
    if not found:
        raise InvalidGomodError("file not found")
    return found


def _find_workfile(filesystem: FileSystem, env: Environment) -> str:
    gowork = env.get("GOWORK")
    if gowork == "off":
        return ""
    if gowork in ("", "auto"):
        goroot = env.get("GOROOT")
        goroot_rel = _clean(posixpath.relpath(goroot, ROOT_DIR)) if goroot.startswith(ROOT_DIR) else _clean(goroot)

        # Never cross GOROOT looking for a go.work file.
        def under_goroot(d: str) -> bool:
            return bool(goroot) and d == goroot_rel

        found = _find_enclosing_file(filesystem, "go.work", under_goroot)
        if not found:
            raise InvalidGoworkError("file not found")
        return found
    if not gowork.startswith(ROOT_DIR):
        raise InvalidGoworkError("GOWORK must be an absolute path")
    return posixpath.relpath(gowork, ROOT_DIR)


def current(filesystem: FileSystem, env: Environment) -> Module:
    """Return the Go module enclosing the current directory."""
    path = _find_modfile(filesystem, env)
    try:
        data = filesystem.read(path)
    except (OSError, GoworkError) as exc:
        raise InvalidGomodError(str(exc)) from exc
    try:
        mod = parse_mod(data)
    except ModfileSyntaxError as exc:
        raise InvalidGomodError(f"{path}:{exc}") from exc
    if mod.module is None:
        raise InvalidGomodError(f"{path}: no module directive")
    return Module(name=mod.module, path=_dir(path))


def list_modules(filesystem: FileSystem, env: Environment) -> list[Module]:
    """Return the modules used by the current Go workspace."""
    path = _find_workfile(filesystem, env)
    if not path:
        raise InvalidGoworkError("workspace disabled by GOWORK=off")
    try:
        data = filesystem.read(path)
        work = parse_work(data)
    except (OSError, GoworkError, ModfileSyntaxError) as exc:
        raise InvalidGoworkError(str(exc)) from exc
    workdir = _dir(path)
    modules: list[Module] = []
    for use in work.uses:
        directory = _join(workdir, use)
        modfile_path = _join(directory, "go.mod")
        try:
            mod = parse_mod(filesystem.read(modfile_path))
        except (OSError, GoworkError, ModfileSyntaxError) as exc:
            raise InvalidGoworkError(str(exc)) from exc
        if mod.module is None:
            raise InvalidGoworkError(f"{modfile_path}: no module directive")
        modules.append(Module(name=mod.module, path=directory))
    return modules


class RealSystem:
    """The live operating system: real files and real environment variables."""

    def get(self, name: str) -> str:
        return os.environ.get(name, "")

    def read(self, name: str) -> bytes:
        try:
            with open(self.abs(name), "rb") as f:
                return f.read()
        except OSError as exc:
            raise BugError(str(exc)) from exc

    def is_file(self, name: str) -> bool:
        return os.path.isfile(self.abs(name))

    def cwd(self) -> str:
        try:
            directory = os.getcwd()
        except OSError as exc:
            raise BugError(str(exc)) from exc
        return posixpath.relpath(directory, ROOT_DIR)

    def abs(self, filepath: str) -> str:
        return posixpath.normpath(posixpath.join(ROOT_DIR, filepath))