"""Direct dependencies of Go modules and selection of modules by domain."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable

from kninfra.gowork import InvalidGoworkError, RealSystem, current, list_modules
from kninfra.modfile import parse_mod

Matcher = Callable[[str], bool]


class NoDomainError(ValueError):
    """Raised when no domain is provided to build a selector."""

    def __init__(self) -> None:
        super().__init__("no domain provided")


def module(gomod: str | os.PathLike[str], selector: Matcher) -> tuple[str, list[str]]:
    """Return a module's name and its sorted direct dependencies accepted by ``selector``."""
    with open(gomod, "rb") as f:
        data = f.read()
    mod = parse_mod(data)
    if mod.module is None:
        raise ValueError(f"{gomod}: no module directive")
    packages = {
        req.path for req in mod.requires if not req.indirect and selector(req.path)
    }
    return mod.module, sorted(packages)


def modules(
    gomod: Iterable[str | os.PathLike[str]], selector: Matcher
) -> tuple[dict[str, list[str]], list[str]]:
    """Map each module to its direct dependencies and list all unique dependencies."""
    files = list(gomod)
    if not files:
        raise ValueError("no go module files provided")
    packages: dict[str, list[str]] = {}
    unique: set[str] = set()
    for path in files:
        name, pkgs = module(path, selector)
        packages[name] = pkgs
        unique.update(pkgs)
    return packages, sorted(unique)


def current_modules_matcher() -> Matcher:
    """Return a matcher for the modules of the current workspace or module."""
    system = RealSystem()
    try:
        mods = list_modules(system, system)
    except InvalidGoworkError:
        mods = [current(system, system)]
    known = frozenset(m.name for m in mods)

    def matches(modname: str) -> bool:
        return modname in known

    return matches


def default_selector(domain: str) -> Matcher:
    """Select modules under ``domain`` that are not part of the current project."""
    domain = domain.strip()
    if not domain:
        raise NoDomainError()
    current_modules = current_modules_matcher()

    def in_domain_but_not_current(modname: str) -> bool:
        return modname.startswith(domain) and not current_modules(modname)

    return in_domain_but_not_current