import pytest

from kninfra.ghutil.models import (
    Issue,
    IssueState,
    Label,
    PullRequest,
    PullRequestState,
)


@pytest.mark.parametrize("enum_cls", [IssueState, PullRequestState])
def test_state_round_trip(enum_cls):
    for member in enum_cls:
        assert enum_cls(member.value) is member
        assert str(member) == member.value


def test_issue_state_from_source_strings():
    assert IssueState("open") is IssueState.OPEN
    assert IssueState("closed") is IssueState.CLOSED
    assert IssueState("all") is IssueState.ALL


def test_pull_request_state_compares_with_string():
    assert PullRequest().state == "open"
    assert PullRequestState("closed") == "closed"


def test_unknown_state_rejected():
    with pytest.raises(ValueError):
        IssueState("merged")


def test_issue_default_labels_are_independent():
    a = Issue()
    b = Issue()
    a.labels.append(Label(name="bug"))
    assert b.labels == []
    assert [lbl.name for lbl in a.labels] == ["bug"]


def test_pull_request_defaults():
    pr = PullRequest()
    assert pr.state is PullRequestState.OPEN
    assert pr.head is None and pr.base is None
    assert pr.labels == []