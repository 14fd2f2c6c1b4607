"""Generic, attribute-based task document handed to the host task model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .attributes import GitHubTaskAttribute

CONNECTOR_KIND = "github"
DATA_VERSION = "1"


@dataclass
class TaskAttribute:
    """One attribute value plus the metadata the host renders it with."""

    id: str
    value: str | None = None
    type: str | None = None
    kind: str | None = None
    label: str = ""
    read_only: bool = False


@dataclass
class TaskComment:
    """A comment in the document, numbered from 1 in tracker order."""

    number: int
    author: str | None
    text: str | None
    creation_date: datetime | None = None


@dataclass
class OperationEntry:
    """A lifecycle operation offered on the task."""

    id: str
    label: str
    is_default: bool = False


@dataclass
class TaskDocument:
    """A task as seen by the host: typed attributes, comments and operations."""

    repository_url: str
    task_id: str | None = None  # None for a task not yet created remotely
    connector_kind: str = CONNECTOR_KIND
    version: str | None = None
    partial: bool = False
    attributes: dict[str, TaskAttribute] = field(default_factory=dict)
    comments: list[TaskComment] = field(default_factory=list)
    operations: list[OperationEntry] = field(default_factory=list)
    selected_operation: str | None = None

    @property
    def is_new(self) -> bool:
        return self.task_id is None

    def create_attribute(
        self, attribute: GitHubTaskAttribute, value: str | None = None
    ) -> TaskAttribute:
        """Add (or replace) the attribute for a catalog entry."""
        attr = TaskAttribute(
            id=attribute.id,
            value=value,
            type=attribute.type,
            kind=attribute.kind,
            label=attribute.label,
            read_only=attribute.read_only,
        )
        self.attributes[attribute.id] = attr
        return attr

    def get_attribute(self, attribute: GitHubTaskAttribute) -> TaskAttribute | None:
        return self.attributes.get(attribute.id)

    def get_value(self, attribute: GitHubTaskAttribute) -> str | None:
        attr = self.attributes.get(attribute.id)
        return attr.value if attr is not None else None

    def set_value(self, attribute: GitHubTaskAttribute, value: str | None) -> None:
        attr = self.attributes.get(attribute.id)
        if attr is None:
            self.create_attribute(attribute, value)
        else:
            attr.value = value

    def to_dict(self) -> dict:
        """Return a JSON-serializable view of the document."""
        return {
            "connector_kind": self.connector_kind,
            "repository_url": self.repository_url,
            "task_id": self.task_id,
            "version": self.version,
            "partial": self.partial,
            "attributes": {
                a.id: {"label": a.label, "type": a.type, "value": a.value}
                for a in self.attributes.values()
            },
            "comments": [
                {
                    "number": c.number,
                    "author": c.author,
                    "text": c.text,
                    "created": c.creation_date.isoformat() if c.creation_date else None,
                }
                for c in self.comments
            ],
            "operations": [
                {"id": op.id, "label": op.label, "default": op.is_default}
                for op in self.operations
            ],
            "selected_operation": self.selected_operation,
        }
