"""Runtime settings resolved from command line flags and the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

import httpx

from .github_issues import GITHUB_API_BASE
from .models import Credentials

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    login: str | None = None
    token: str | None = field(default=None, repr=False)
    api_base: str = GITHUB_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    proxies: dict[str, str] = field(default_factory=dict)

    @property
    def credentials(self) -> Credentials | None:
        """Credentials, or None when the login or token is missing."""
        if not self.login or not self.token:
            return None
        return Credentials(username=self.login, api_token=self.token)


def load_settings(
    login: str | None = None,
    token: str | None = None,
    env: dict[str, str] | None = None,
) -> Settings:
    """Build settings, preferring explicit values over environment variables.

    Raises:
        ValueError: If GHISSUE_TIMEOUT is not a number
    """
    env = os.environ if env is None else env
    api_base = env.get("GHISSUE_API_BASE") or GITHUB_API_BASE

    proxies: dict[str, str] = {}
    proxy = env.get("GHISSUE_PROXY")
    if proxy:
        proxies[_origin(api_base)] = proxy

    timeout = env.get("GHISSUE_TIMEOUT")
    return Settings(
        login=login or env.get("GITHUB_LOGIN") or env.get("GHISSUE_LOGIN"),
        token=token or env.get("GITHUB_TOKEN") or env.get("GHISSUE_TOKEN"),
        api_base=api_base,
        timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        proxies=proxies,
    )


def _origin(url: str) -> str:
    """'https://github.com/api/v2/json/' -> 'https://github.com'"""
    parsed = httpx.URL(url)
    origin = f"{parsed.scheme}://{parsed.host}"
    return f"{origin}:{parsed.port}" if parsed.port else origin
