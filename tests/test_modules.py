import pytest

from kninfra.gomod.modules import (
    NoDomainError,
    current_modules_matcher,
    default_selector,
    module,
    modules,
)
from kninfra.gowork import InvalidGomodError
from kninfra.modfile import ModfileSyntaxError

EXAMPLE1 = """module knative.dev/test-demo1

go 1.14

require (
	github.com/google/go-cmp v0.4.0
	k8s.io/api v0.17.4
	k8s.io/apimachinery v0.17.4
	k8s.io/client-go v11.0.1-0.20190805182717-6502b5e7b1b5+incompatible
	knative.dev/eventing v0.13.0
	knative.dev/pkg v0.0.0-20200306230727-a56a6ea3fa56
	knative.dev/serving v0.13.0
	knative.dev/hack v0.0.0-20200306230727-a56a6ea3fa56 // indirect
)
"""

EXAMPLE2 = """module knative.dev/test-demo2

go 1.14

require (
	k8s.io/api v0.17.4
	k8s.io/apimachinery v0.17.4
	k8s.io/client-go v0.17.4
	knative.dev/discovery v0.13.0
	knative.dev/pkg v0.0.0-20200306230727-a56a6ea3fa56
)

require knative.dev/caching v0.13.0 // indirect
"""

BAD = "this is not a go module file\n"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    project = tmp_path / "project"
    project.mkdir()
    (project / "go.mod").write_text("module knative.dev/test-infra\n\ngo 1.18\n")
    data = tmp_path / "data"
    data.mkdir()
    (data / "gomod.example1").write_text(EXAMPLE1)
    (data / "gomod.example2").write_text(EXAMPLE2)
    (data / "bad.example").write_text(BAD)
    monkeypatch.chdir(project)
    monkeypatch.setenv("GOWORK", "off")
    monkeypatch.delenv("GO111MODULE", raising=False)
    return data


@pytest.mark.parametrize(
    "file, domain, want_name, want_deps",
    [
        (
            "gomod.example1",
            "knative.dev",
            "knative.dev/test-demo1",
            ["knative.dev/eventing", "knative.dev/pkg", "knative.dev/serving"],
        ),
        (
            "gomod.example1",
            "      knative.dev   ",
            "knative.dev/test-demo1",
            ["knative.dev/eventing", "knative.dev/pkg", "knative.dev/serving"],
        ),
        (
            "gomod.example1",
            "k8s.io",
            "knative.dev/test-demo1",
            ["k8s.io/api", "k8s.io/apimachinery", "k8s.io/client-go"],
        ),
        ("gomod.example1", "example.com", "knative.dev/test-demo1", []),
        (
            "gomod.example2",
            "knative.dev",
            "knative.dev/test-demo2",
            ["knative.dev/discovery", "knative.dev/pkg"],
        ),
    ],
)
def test_module(workspace, file, domain, want_name, want_deps):
    name, deps = module(workspace / file, default_selector(domain))
    assert name == want_name
    assert deps == want_deps


def test_module_bad_example(workspace):
    with pytest.raises(ModfileSyntaxError):
        module(workspace / "bad.example", default_selector("knative.dev"))


def test_module_missing_file(workspace):
    with pytest.raises(FileNotFoundError):
        module(workspace / "does-not-exist", default_selector("knative.dev"))


def test_module_no_file(workspace):
    with pytest.raises(OSError):
        module("", default_selector("knative.dev"))


def test_modules_knative(workspace):
    pkgs, deps = modules(
        [workspace / "gomod.example1", workspace / "gomod.example2"],
        default_selector("knative.dev"),
    )
    assert pkgs == {
        "knative.dev/test-demo1": [
            "knative.dev/eventing",
            "knative.dev/pkg",
            "knative.dev/serving",
        ],
        "knative.dev/test-demo2": ["knative.dev/discovery", "knative.dev/pkg"],
    }
    assert deps == [
        "knative.dev/discovery",
        "knative.dev/eventing",
        "knative.dev/pkg",
        "knative.dev/serving",
    ]


def test_modules_k8s(workspace):
    pkgs, deps = modules(
        [workspace / "gomod.example1", workspace / "gomod.example2"],
        default_selector("k8s.io"),
    )
    k8s = ["k8s.io/api", "k8s.io/apimachinery", "k8s.io/client-go"]
    assert pkgs == {"knative.dev/test-demo1": k8s, "knative.dev/test-demo2": k8s}
    assert deps == k8s


def test_modules_duplicate(workspace):
    pkgs, deps = modules(
        [workspace / "gomod.example1", workspace / "gomod.example1"],
        default_selector("knative.dev"),
    )
    expected = ["knative.dev/eventing", "knative.dev/pkg", "knative.dev/serving"]
    assert pkgs == {"knative.dev/test-demo1": expected}
    assert deps == expected


def test_modules_bad_example(workspace):
    with pytest.raises(ModfileSyntaxError):
        modules(
            [workspace / "gomod.example1", workspace / "bad.example"],
            default_selector("knative.dev"),
        )


def test_modules_missing_file(workspace):
    with pytest.raises(FileNotFoundError):
        modules(
            [workspace / "gomod.example1", workspace / "does-not-exist"],
            default_selector("knative.dev"),
        )


def test_modules_no_file(workspace):
    with pytest.raises(ValueError, match="no go module files provided"):
        modules([], default_selector("knative.dev"))


@pytest.mark.parametrize("domain", ["", "   "])
def test_default_selector_no_domain(domain):
    with pytest.raises(NoDomainError, match="no domain provided"):
        default_selector(domain)


def test_default_selector(workspace):
    sel = default_selector("knative.dev")
    mods = [
        "knative.dev/test-infra",
        "knative.dev/serving",
        "knative.dev/eventing",
        "knative.dev/pkg",
        "github.com/blang/semver/v4",
        "github.com/google/go-cmp",
        "go.uber.org/atomic",
    ]
    assert [m for m in mods if sel(m)] == [
        "knative.dev/serving",
        "knative.dev/eventing",
        "knative.dev/pkg",
    ]


def test_current_modules_matcher_workspace(tmp_path, monkeypatch):
    (tmp_path / "go.work").write_text("go 1.18\n\nuse (\n\t.\n\ta\n)\n")
    (tmp_path / "go.mod").write_text("module foo\n\ngo 1.18\n")
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "go.mod").write_text("module foo/a\n\ngo 1.18\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GOWORK", raising=False)
    monkeypatch.delenv("GOROOT", raising=False)
    matcher = current_modules_matcher()
    assert matcher("foo") is True
    assert matcher("foo/a") is True
    assert matcher("foo/b") is False


def test_current_modules_matcher_module_mode_off(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GOWORK", "off")
    monkeypatch.setenv("GO111MODULE", "off")
    with pytest.raises(InvalidGomodError):
        current_modules_matcher()