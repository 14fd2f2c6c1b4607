"""Helpers for GitHub task repository URLs."""

from __future__ import annotations

import re

RE_REPOSITORY_URL = re.compile(r"^https?://(?:www\.)?github\.com/([^/\s]+)/([^/\s]+?)(?:\.git)?/?$")


def parse_repository_url(url: str) -> tuple[str, str]:
    """Split ``https://github.com/<user>/<repo>`` into (user, repo).

    Raises:
        ValueError: If the URL doesn't point at a GitHub repository
    """
    m = RE_REPOSITORY_URL.match(url.strip())
    if not m:
        raise ValueError(f"Not a GitHub repository URL: {url!r}")
    return m.group(1), m.group(2)


def repository_url(user: str, repo: str) -> str:
    return f"https://github.com/{user}/{repo}"
