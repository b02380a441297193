"""Remote git repositories and release reference selection."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import IntEnum

import requests
from semver import Version

_TAG_PREFIX = "v"
_BRANCH_PREFIX = "release-"
_SHORT_PREFIXES = ("refs/heads/", "refs/tags/", "refs/remotes/")
_USER_AGENT = "git/kninfra"
_TIMEOUT = 30


class RefType(IntEnum):
    """Kind of reference chosen for a module."""

    BRANCH = 0
    DEFAULT_BRANCH = 1
    RELEASE_BRANCH = 2
    RELEASE = 3
    NO_REF = 4
    UNDEFINED = 5

    def __str__(self) -> str:
        if RefType.DEFAULT_BRANCH <= self <= RefType.NO_REF:
            return _REF_TYPE_NAMES[self]
        return ""


_REF_TYPE_NAMES = ["Branch", "Default Branch", "Release Branch", "Release", "No Ref"]


class RulesetType(IntEnum):
    """Rules used to pick the best reference of a repository."""

    ANY = 0
    RELEASE_OR_RELEASE_BRANCH = 1
    RELEASE = 2
    RELEASE_BRANCH = 3
    INVALID = 4

    def __str__(self) -> str:
        return _RULESET_NAMES[self]


_RULESET_NAMES = ["Any", "ReleaseOrBranch", "Release", "Branch", "Invalid"]
_RULESET_LOOKUP = {name.lower(): RulesetType(i) for i, name in enumerate(_RULESET_NAMES)}


def ruleset(rule: str) -> RulesetType:
    """Convert a rule name (case-insensitive) into a RulesetType."""
    return _RULESET_LOOKUP.get(rule.lower(), RulesetType.INVALID)


def rulesets() -> list[str]:
    """Return the valid rule names, without Invalid."""
    return [
        str(RulesetType.ANY),
        str(RulesetType.RELEASE_OR_RELEASE_BRANCH),
        str(RulesetType.RELEASE),
        str(RulesetType.RELEASE_BRANCH),
    ]


def _normalize_tag_version(v: str) -> tuple[str, bool]:
    if v.startswith(_TAG_PREFIX):
        return v[len(_TAG_PREFIX) :], True
    return v, False


def _normalize_branch_version(v: str) -> tuple[str, bool]:
    if v.startswith(_BRANCH_PREFIX):
        return v[len(_BRANCH_PREFIX) :] + ".0", True
    return v, False


def _make_version(s: str) -> Version:
    try:
        return Version.parse(s)
    except ValueError:
        return Version(0, 0, 0)


def release_version(v: Version) -> str:
    """Return the release tag for a version, e.g. ``v1.2.3``."""
    return f"v{v.major}.{v.minor}.{v.patch}"


def release_branch_version(v: Version) -> str:
    """Return the release branch for a version, e.g. ``release-1.2``."""
    return f"release-{v.major}.{v.minor}"


def parse_ref(ref: str) -> tuple[str, str, RefType]:
    """Split ``module@ref`` into module, ref and the kind of ref."""
    parts = ref.split("@")
    if len(parts) != 2:
        return ref, "", RefType.UNDEFINED
    module, name = parts
    if _normalize_tag_version(name)[1]:
        return module, name, RefType.RELEASE
    if _normalize_branch_version(name)[1]:
        return module, name, RefType.RELEASE_BRANCH
    return module, name, RefType.BRANCH


@dataclass
class Repo:
    """A simplified git remote: its tags, branches and default branch."""

    ref: str
    default_branch: str = ""
    tags: list[str] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)

    def best_ref_for(
        self, release: Version, module_release: Version, ruleset: RulesetType
    ) -> tuple[str, RefType]:
        """Return ``module@ref`` and its kind for a release under the given rules."""
        if ruleset in (RulesetType.ANY, RulesetType.RELEASE_OR_RELEASE_BRANCH, RulesetType.RELEASE):
            largest: Version | None = None
            for tag in self.tags:
                sv, ok = _normalize_tag_version(tag)
                if not ok:
                    continue
                v = _make_version(sv)
                # Tags with pre-release or build parts cannot be fetched as modules.
                if v.prerelease is not None or v.build is not None:
                    continue
                if v.major == module_release.major and v.minor == module_release.minor:
                    if largest is None or largest < v:
                        largest = v
            if largest is not None:
                return f"{self.ref}@{release_version(largest)}", RefType.RELEASE

        if ruleset in (
            RulesetType.ANY,
            RulesetType.RELEASE_OR_RELEASE_BRANCH,
            RulesetType.RELEASE_BRANCH,
        ):
            largest = None
            for branch in self.branches:
                bv, ok = _normalize_branch_version(branch)
                if not ok:
                    continue
                v = _make_version(bv)
                if v.major == release.major and v.minor == release.minor:
                    if largest is None or largest < v:
                        largest = v
            if largest is not None:
                return f"{self.ref}@{release_branch_version(largest)}", RefType.RELEASE_BRANCH

        if ruleset == RulesetType.ANY:
            return f"{self.ref}@{self.default_branch}", RefType.DEFAULT_BRANCH

        return self.ref, RefType.NO_REF


def _short(name: str) -> str:
    for prefix in _SHORT_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


def _pkt_lines(data: bytes):
    i = 0
    while i < len(data):
        try:
            length = int(data[i : i + 4], 16)
        except ValueError as exc:
            raise OSError("malformed pkt-line in reference advertisement") from exc
        if length == 0:
            i += 4
            continue
        if length < 4 or i + length > len(data):
            raise OSError("malformed pkt-line in reference advertisement")
        yield data[i + 4 : i + length]
        i += length


def _parse_advertisement(data: bytes) -> list[tuple[str, str | None]]:
    names: list[str] = []
    symrefs: dict[str, str] = {}
    for raw in _pkt_lines(data):
        line = raw.decode("utf-8", "replace").rstrip("\n")
        if line.startswith("#"):
            continue
        head, _, caps = line.partition("\0")
        for cap in caps.split():
            if cap.startswith("symref="):
                src, _, dst = cap[len("symref=") :].partition(":")
                symrefs[src] = dst
        _, _, name = head.partition(" ")
        if not name or name.endswith("^{}"):
            continue
        names.append(name)
    if "HEAD" in symrefs and "HEAD" not in names:
        names.append("HEAD")
    return [(name, symrefs.get(name)) for name in names]


def _list_http(url: str) -> list[tuple[str, str | None]]:
    endpoint = url.rstrip("/") + "/info/refs"
    try:
        resp = requests.get(
            endpoint,
            params={"service": "git-upload-pack"},
            headers={"User-Agent": _USER_AGENT},
            timeout=_TIMEOUT,
        )
    except requests.RequestException as exc:
        raise OSError(f"listing {url}: {exc}") from exc
    if resp.status_code != 200:
        raise OSError(f"listing {url}: unexpected status {resp.status_code}")
    return _parse_advertisement(resp.content)


def _list_command(url: str) -> list[tuple[str, str | None]]:
    try:
        result = subprocess.run(
            ["git", "ls-remote", "--symref", url],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise OSError(f"listing {url}: {exc}") from exc
    names: list[str] = []
    symrefs: dict[str, str] = {}
    for line in result.stdout.splitlines():
        left, _, name = line.partition("\t")
        if left.startswith("ref: "):
            symrefs[name] = left[len("ref: ") :]
            continue
        if not name or name.endswith("^{}") or name in names:
            continue
        names.append(name)
    if "HEAD" in symrefs and "HEAD" not in names:
        names.append("HEAD")
    return [(name, symrefs.get(name)) for name in names]


def get_repo(ref: str, url: str) -> Repo:
    """List the references of a remote repository into a Repo."""
    if url.startswith(("http://", "https://")):
        refs = _list_http(url)
    else:
        refs = _list_command(url)
    repo = Repo(ref=ref)
    for name, target in refs:
        if name.startswith("refs/tags/"):
            repo.tags.append(_short(name))
        elif name.startswith("refs/heads/"):
            repo.branches.append(_short(name))
        elif name == "HEAD":
            repo.default_branch = _short(target or "")
    return repo


@dataclass
class Info:
    """Details used to interact with a GitHub repository."""

    org: str = ""
    repo: str = ""
    head: str = ""
    base: str = ""
    user_id: str = ""
    user_name: str = ""
    email: str = ""

    def get_head_ref(self) -> str:
        """Return the head ref in the form ``user:head``."""
        return f"{self.user_id}:{self.head}"