[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kninfra"
version = "0.1.0"
description = "Test-infrastructure helpers: GCS links, GKE cluster requests, go.mod/go.work parsing, release ref selection and a fake GitHub client"
requires-python = ">=3.10"
keywords = ["testing", "infrastructure", "gke", "gcs", "go-modules", "go-workspace", "release", "github"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]
dependencies = [
    "requests",
    "semver",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["kninfra"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
