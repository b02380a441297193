"""Plain data types for GitHub issues, comments, pull requests and commits."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class IssueState(str, Enum):
    """State of a GitHub issue, or ``all`` when querying issues."""

    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"

    def __str__(self) -> str:
        return self.value


class PullRequestState(str, Enum):
    """State of a pull request, or ``all`` when querying pull requests."""

    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"

    def __str__(self) -> str:
        return self.value


@dataclass
class User:
    """A GitHub account."""

    login: str = ""


@dataclass
class Label:
    """A label attached to an issue or pull request."""

    name: str = ""


@dataclass
class Issue:
    """A GitHub issue."""

    number: int = 0
    title: str = ""
    body: str = ""
    state: IssueState | str = IssueState.OPEN
    user: User | None = None
    url: str = ""
    repository_url: str = ""
    labels: list[Label] = field(default_factory=list)


@dataclass
class IssueComment:
    """A comment on an issue or pull request."""

    id: int = 0
    body: str = ""
    user: User | None = None


@dataclass
class PullRequestBranch:
    """One end of a pull request: its label (``user:ref``) and ref name."""

    label: str = ""
    ref: str = ""


@dataclass
class PullRequest:
    """A GitHub pull request."""

    number: int = 0
    title: str = ""
    body: str = ""
    state: PullRequestState | str = PullRequestState.OPEN
    maintainer_can_modify: bool = False
    head: PullRequestBranch | None = None
    base: PullRequestBranch | None = None
    labels: list[Label] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass
class RepositoryCommit:
    """A commit of a repository, identified by its SHA."""

    sha: str = ""


@dataclass
class CommitFile:
    """A file changed by a commit, with its patch."""

    filename: str = ""
    patch: str = ""


@dataclass
class Branch:
    """A branch of a repository."""

    name: str = ""