"""Data models for issues and comments exchanged with the tracker."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    """Login and API token sent with every call to the tracker."""

    username: str
    api_token: str = field(repr=False)


@dataclass
class RemoteIssue:
    """An issue as the tracker represents it."""

    number: str | None = None  # None until the tracker assigns one
    title: str | None = None
    body: str | None = None
    state: str | None = None  # "open" or "closed"
    created_at: str | None = None  # e.g. "2010/02/02 22:58:39 -0800"
    updated_at: str | None = None
    closed_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> RemoteIssue:
        number = data.get("number")
        return cls(
            number=str(number) if number is not None else None,
            title=data.get("title"),
            body=data.get("body"),
            state=data.get("state"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            closed_at=data.get("closed_at"),
        )


@dataclass(frozen=True)
class RemoteComment:
    """A comment attached to an issue. Only ever decoded, never built locally."""

    id: str | None
    created_at: str | None
    body: str | None
    user: str | None

    @classmethod
    def from_dict(cls, data: dict) -> RemoteComment:
        comment_id = data.get("id")
        return cls(
            id=str(comment_id) if comment_id is not None else None,
            created_at=data.get("created_at"),
            body=data.get("body"),
            user=data.get("user"),
        )
