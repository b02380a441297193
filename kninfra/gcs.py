"""Helpers for Google Cloud Storage URLs."""

from __future__ import annotations

import json
from urllib.parse import urlsplit, urlunsplit

CONSOLE_HOST = "console.cloud.google.com"


def _quote(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _clean(p: str) -> str:
    if not p:
        return "."
    rooted = p.startswith("/")
    stack: list[str] = []
    for seg in p.split("/"):
        if seg in ("", "."):
            continue
        if seg == "..":
            if stack and stack[-1] != "..":
                stack.pop()
            elif not rooted:
                stack.append("..")
            continue
        stack.append(seg)
    joined = "/".join(stack)
    if rooted:
        return "/" + joined
    return joined or "."


def _join(*elems: str) -> str:
    parts = [e for e in elems if e]
    if not parts:
        return ""
    return _clean("/".join(parts))


def link_to_bucket_and_object(gs_url: str) -> tuple[str, str]:
    """Split a ``gs://bucket/object`` link into its bucket and object path."""
    gs_url = gs_url.replace("gs://", "", 1)
    idx = gs_url.find("/")
    if idx == -1 or idx + 1 >= len(gs_url):
        raise ValueError(
            f"the gsUrl ({_quote(gs_url)}) cannot be converted to bucket/object"
        )
    return gs_url[:idx], gs_url[idx + 1 :]


def build_log_path(gcs_url: str) -> str:
    """Return the build log location under a test result URL."""
    parts = urlsplit(gcs_url)
    path = _join(parts.path, "build-log.txt")
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def get_console_url(gcs_url: str) -> str:
    """Return a browser-renderable cloud console link for a GCS URL."""
    parts = urlsplit(gcs_url)
    path = _join("storage/browser", parts.netloc, parts.path)
    return urlunsplit(("https", CONSOLE_HOST, path, parts.query, parts.fragment))