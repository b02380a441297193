"""Test-infrastructure helpers for Go projects on GitHub and Google Cloud."""

__version__ = "0.1.0"