# kninfra

Utilities for continuous-integration and release tooling around Go projects
hosted on GitHub and tested on Google Cloud.

## Modules

- `kninfra.gcs` – split `gs://bucket/object` links into bucket and object
  (`link_to_bucket_and_object`), derive the build log location under a test
  result URL (`build_log_path`) and the browser console link
  (`get_console_url`).
- `kninfra.gke.addon` – turn addon names (`istio`,
  `horizontalpodautoscaling`, `httploadbalancing`, `cloudrun`, any case) into
  an `AddonsConfig` with `get_addons_config`; unknown names raise
  `ValueError`.
- `kninfra.gke.request` – the `Request` settings for a cluster, validated and
  turned into a `CreateClusterRequest` by `new_create_cluster_request`
  (default node pool with autoscaling, cloud-platform scope, optional
  Workload Identity, service account, release channel or cluster version,
  `latest` when neither is given).
- `kninfra.modfile` – parse `go.mod` (`parse_mod` → `ModFile` with
  `Requirement`s, including the `// indirect` marker) and `go.work`
  (`parse_work` → `WorkFile`); malformed input raises `ModfileSyntaxError`.
- `kninfra.gowork` – find the module enclosing the current directory
  (`current`) or the modules of the current workspace (`list_modules`),
  honouring `GO111MODULE` and `GOWORK`. File access and environment are
  passed in; `RealSystem` provides the live ones. Failures raise
  `InvalidGomodError`, `InvalidGoworkError` or `BugError`, all subclasses of
  `GoworkError`.
- `kninfra.git` – list a remote's tags, branches and default branch into a
  `Repo` (`get_repo`, over smart HTTP for `http(s)://` URLs and
  `git ls-remote` otherwise), and pick the best release tag, release branch
  or default branch with `Repo.best_ref_for` under a `RulesetType`. Also
  `parse_ref`, `release_version`, `release_branch_version`, `ruleset`,
  `rulesets` and the `Info` record with `get_head_ref`.
- `kninfra.gomod.modules` – direct, non-indirect dependencies of one
  (`module`) or several (`modules`) `go.mod` files, filtered by a selector;
  `default_selector(domain)` keeps modules under a domain that are not part of
  the current workspace, and raises `NoDomainError` for an empty domain.
- `kninfra.ghutil.models` – plain data classes for users, labels, issues,
  comments, pull requests, commits, files and branches, with the
  `IssueState` and `PullRequestState` enums.
- `kninfra.ghutil.fake` – `FakeGithubClient`, an in-memory GitHub client for
  tests: create, list, close and reopen issues; add, edit and delete
  comments; add and remove labels; create, edit, list and label pull
  requests; attach commits and files to them.

## Installation

```
pip install kninfra
```

For running the test suite:

```
pip install "kninfra[test]"
pytest
```

## Examples

```python
from kninfra.gcs import get_console_url, link_to_bucket_and_object

get_console_url("gs://my-bucket/logs/123")
# 'https://console.cloud.google.com/storage/browser/my-bucket/logs/123'

link_to_bucket_and_object("gs://my-bucket/logs/123/build-log.txt")
# ('my-bucket', 'logs/123/build-log.txt')
```

```python
import semver
from kninfra.git import Repo, RulesetType

repo = Repo(ref="example.com/mod", default_branch="main",
            tags=["v0.1.0", "v0.2.1"], branches=["release-0.3"])
v = semver.Version.parse("0.2.0")
repo.best_ref_for(v, v, RulesetType.ANY)
# ('example.com/mod@v0.2.1', <RefType.RELEASE: 3>)
```

```python
from kninfra.gke.request import Request, new_create_cluster_request

req = new_create_cluster_request(
    Request(cluster_name="demo", min_nodes=1, max_nodes=3,
            node_type="e2-standard-4", addons=["istio"])
)
req.cluster.initial_cluster_version
# 'latest'
```

```python
from kninfra.gomod.modules import default_selector, module

selector = default_selector("example.com")
name, deps = module("go.mod", selector)
```

```python
from kninfra.ghutil.fake import FakeGithubClient
from kninfra.ghutil.models import User

gh = FakeGithubClient(user=User(login="someone"))
issue = gh.create_issue("org", "repo", "title", "body")
gh.add_labels_to_issue("org", "repo", issue.number, ["bug"])
gh.list_issues_by_repo("org", "repo", ["bug"])
```

## What it does not do

- There is no client for the live container service or GitHub API: cluster
  requests are built but not sent, and only the in-memory GitHub fake is
  provided.
- Go module paths are not resolved to repositories, so there is no ready-made
  check or floating of a module's dependencies to release refs; combine
  `kninfra.gomod.modules`, `kninfra.git.get_repo` and `Repo.best_ref_for`
  yourself.
- There are no command-line tools; everything is a library call.