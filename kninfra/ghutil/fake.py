"""An in-memory GitHub client for tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from kninfra.ghutil.models import (
    Branch,
    CommitFile,
    Issue,
    IssueComment,
    IssueState,
    Label,
    PullRequest,
    PullRequestBranch,
    PullRequestState,
    RepositoryCommit,
    User,
)


@dataclass
class FakeGithubClient:
    """Keeps issues, comments, pull requests and commits in memory.

    Issues, comments and pull requests share one counter for their numbers.
    """

    user: User | None = None
    repos: list[str] = field(default_factory=list)
    # repo -> issue number -> issue
    issues: dict[str, dict[int, Issue]] = field(default_factory=dict)
    # issue number -> comment id -> comment
    comments: dict[int, dict[int, IssueComment]] = field(default_factory=dict)
    # repo -> pull request number -> pull request
    pull_requests: dict[str, dict[int, PullRequest]] = field(default_factory=dict)
    # pull request number -> commits
    pr_commits: dict[int, list[RepositoryCommit]] = field(default_factory=dict)
    # commit SHA -> files
    commit_files: dict[str, list[CommitFile]] = field(default_factory=dict)
    # repo -> branches
    branches: dict[str, list[Branch]] = field(default_factory=dict)
    next_number: int = 0
    base_url: str = "fakeurl"

    def _get_next_number(self) -> int:
        self.next_number += 1
        return self.next_number

    def _find_issue(self, repo: str, issue_number: int) -> Issue:
        issue = self.issues.get(repo, {}).get(issue_number)
        if issue is None:
            raise LookupError("cannot find issue")
        return issue

    def _update_issue_state(
        self, org: str, repo: str, state: IssueState, issue_number: int
    ) -> None:
        self._find_issue(repo, issue_number).state = state

    def get_github_user(self) -> User | None:
        """Return the authenticated user."""
        return self.user

    def list_repos(self, org: str) -> list[str]:
        """Return the repositories of the organisation."""
        return self.repos

    def list_issues_by_repo(
        self, org: str, repo: str, labels: list[str] | None = None
    ) -> list[Issue]:
        """Return the issues of a repository carrying every one of ``labels``."""
        wanted = set(labels or ())
        return [
            issue
            for issue in self.issues.get(repo, {}).values()
            if wanted <= {label.name for label in issue.labels}
        ]

    def create_issue(self, org: str, repo: str, title: str, body: str) -> Issue:
        """Open a new issue authored by the current user."""
        number = self._get_next_number()
        repo_url = f"{self.base_url}/{org}/{repo}"
        issue = Issue(
            number=number,
            title=title,
            body=body,
            state=IssueState.OPEN,
            user=User(login=self.user.login),
            url=f"{repo_url}/{number}",
            repository_url=repo_url,
        )
        self.issues.setdefault(repo, {})[number] = issue
        return issue

    def close_issue(self, org: str, repo: str, issue_number: int) -> None:
        """Close an issue."""
        self._update_issue_state(org, repo, IssueState.CLOSED, issue_number)

    def reopen_issue(self, org: str, repo: str, issue_number: int) -> None:
        """Reopen an issue."""
        self._update_issue_state(org, repo, IssueState.OPEN, issue_number)

    def list_comments(self, org: str, repo: str, issue_number: int) -> list[IssueComment]:
        """Return all comments of an issue."""
        return list(self.comments.get(issue_number, {}).values())

    def get_comment(self, org: str, repo: str, comment_id: int) -> IssueComment:
        """Return a comment by its id."""
        for comments in self.comments.values():
            if comment_id in comments:
                return comments[comment_id]
        raise LookupError("cannot find comment")

    def create_comment(
        self, org: str, repo: str, issue_number: int, comment_body: str
    ) -> IssueComment:
        """Add a comment by the current user to an issue."""
        comment_id = self._get_next_number()
        comment = IssueComment(id=comment_id, body=comment_body, user=self.user)
        self.comments.setdefault(issue_number, {})[comment_id] = comment
        return comment

    def edit_comment(self, org: str, repo: str, comment_id: int, comment_body: str) -> None:
        """Replace the body of a comment."""
        self.get_comment(org, repo, comment_id).body = comment_body

    def delete_comment(self, org: str, repo: str, comment_id: int) -> None:
        """Remove a comment."""
        for comments in self.comments.values():
            if comment_id in comments:
                del comments[comment_id]
                return
        raise LookupError("cannot find comment")

    def add_labels_to_issue(
        self, org: str, repo: str, issue_number: int, labels: list[str]
    ) -> None:
        """Attach labels to an issue."""
        issue = self._find_issue(repo, issue_number)
        issue.labels.extend(Label(name=name) for name in labels)

    def remove_label_for_issue(
        self, org: str, repo: str, issue_number: int, label: str
    ) -> None:
        """Detach a label from an issue; the last matching one is removed."""
        issue = self._find_issue(repo, issue_number)
        matches = [i for i, lbl in enumerate(issue.labels) if lbl.name == label]
        if not matches:
            raise LookupError("cannot find label")
        del issue.labels[matches[-1]]

    def list_pull_requests(
        self, org: str, repo: str, head: str = "", base: str = ""
    ) -> list[PullRequest]:
        """Return pull requests matching ``head`` (``user:ref``) and ``base``, newest first."""
        prs = self.pull_requests.get(repo)
        if prs is None:
            raise LookupError(f"repo {repo} not exist")
        res = [
            pr
            for pr in prs.values()
            if (not head or (pr.head is not None and pr.head.label == head))
            and (not base or (pr.base is not None and pr.base.ref == base))
        ]
        res.sort(
            key=lambda pr: (pr.created_at is not None, pr.created_at or datetime.min),
            reverse=True,
        )
        return res

    def list_commits(self, org: str, repo: str, pr_id: int) -> list[RepositoryCommit]:
        """Return the commits of a pull request."""
        commits = self.pr_commits.get(pr_id)
        if commits is None:
            raise LookupError(f"no commits found for PR '{pr_id}'")
        return commits

    def list_files(self, org: str, repo: str, pr_id: int) -> list[CommitFile]:
        """Return the files changed by all commits of a pull request."""
        files: list[CommitFile] = []
        for commit in self.list_commits(org, repo, pr_id):
            commit_files = self.commit_files.get(commit.sha)
            if commit_files is None:
                # Empty commits are not allowed.
                raise LookupError(f"no files found for commit '{commit.sha}'")
            files.extend(commit_files)
        return files

    def get_pull_request(self, org: str, repo: str, pr_id: int) -> PullRequest:
        """Return a pull request by its number."""
        pr = self.pull_requests.get(repo, {}).get(pr_id)
        if pr is None:
            raise LookupError(f"PR not exist: '{pr_id}'")
        return pr

    def get_pull_request_by_commit_id(
        self, org: str, repo: str, commit_id: str
    ) -> PullRequest:
        """Return the single pull request of ``repo`` holding the commit."""
        res: list[PullRequest] = []
        for pr_number, commits in self.pr_commits.items():
            for commit in commits:
                if commit.sha != commit_id:
                    continue
                pr = self.pull_requests.get(repo, {}).get(pr_number)
                if pr is not None:
                    res.append(pr)
        if len(res) != 1:
            raise LookupError(
                "GetPullRequestByCommitID is expected to return 1 PullRequest, "
                f"got {len(res)}"
            )
        return res[0]

    def edit_pull_request(
        self, org: str, repo: str, pr_id: int, title: str, body: str
    ) -> PullRequest:
        """Replace the title and body of a pull request."""
        pr = self.get_pull_request(org, repo, pr_id)
        pr.title = title
        pr.body = body
        return pr

    def ensure_label_for_pull_request(
        self, org: str, repo: str, pr_id: int, label: str
    ) -> None:
        """Add ``label`` to a pull request unless it has it (case-insensitively)."""
        pr = self.get_pull_request(org, repo, pr_id)
        wanted = label.casefold()
        if not any(lbl.name.casefold() == wanted for lbl in pr.labels):
            pr.labels.append(Label(name=label))

    def create_pull_request(
        self, org: str, repo: str, head: str, base: str, title: str, body: str
    ) -> PullRequest:
        """Open a pull request from ``head`` (``user:ref``) into ``base``."""
        number = self._get_next_number()
        pr = PullRequest(
            number=number,
            title=title,
            body=body,
            state=PullRequestState.OPEN,
            maintainer_can_modify=True,
        )
        if head:
            tokens = head.split(":")
            if len(tokens) != 2:
                raise ValueError(f"invalid head, want: 'user:ref', got: '{head}'")
            pr.head = PullRequestBranch(label=head, ref=tokens[1])
        if base:
            pr.base = PullRequestBranch(label=f"{repo}:{base}", ref=base)
        self.pull_requests.setdefault(repo, {})[number] = pr
        return pr

    def list_branches(self, org: str, repo: str) -> list[Branch]:
        """Return the branches of every known repository."""
        return [b for branches in self.branches.values() for b in branches]

    def add_file_to_commit(
        self, org: str, repo: str, sha: str, filename: str, patch: str
    ) -> None:
        """Record a changed file for a commit already added to a pull request."""
        known = any(c.sha == sha for commits in self.pr_commits.values() for c in commits)
        if not known:
            raise LookupError(f"commit {sha} not exist")
        self.commit_files.setdefault(sha, []).append(
            CommitFile(filename=filename, patch=patch)
        )

    def add_commit_to_pull_request(
        self, org: str, repo: str, pr_id: int, sha: str
    ) -> None:
        """Record a commit on an existing pull request."""
        prs = self.pull_requests.get(repo)
        if prs is None:
            raise LookupError(f"repo {repo} not exist")
        if pr_id not in prs:
            raise LookupError(f"Pull Request {pr_id} not exist")
        self.pr_commits.setdefault(pr_id, []).append(RepositoryCommit(sha=sha))