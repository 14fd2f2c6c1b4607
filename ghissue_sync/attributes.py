"""Task attribute catalog and lifecycle operations for GitHub issues."""

from __future__ import annotations

import enum

# Attribute value types understood by the host task model
TYPE_SHORT_TEXT = "shortText"
TYPE_LONG_RICH_TEXT = "longRichText"
TYPE_DATETIME = "dateTime"

# Attribute kinds (where the host shows the attribute)
KIND_DEFAULT = "task.common.kind.default"


class GitHubTaskAttribute(enum.Enum):
    """The fixed set of task attributes a GitHub issue maps onto.

    Each member carries (id, type, kind, label, read_only,
    required_for_completeness, init_field).
    """

    KEY = ("task.common.key", TYPE_SHORT_TEXT, KIND_DEFAULT, "Key:", True, True, False)
    TITLE = ("task.common.summary", TYPE_SHORT_TEXT, None, "Summary:", False, True, True)
    BODY = ("task.common.description", TYPE_LONG_RICH_TEXT, None, "Description:", False, True, True)
    STATUS = ("task.common.status", TYPE_SHORT_TEXT, KIND_DEFAULT, "Status:", True, True, False)
    CREATION_DATE = ("task.common.date.created", TYPE_DATETIME, KIND_DEFAULT, "Created:", True, True, False)
    MODIFICATION_DATE = ("task.common.date.modified", TYPE_DATETIME, KIND_DEFAULT, "Modified:", True, False, False)
    CLOSED_DATE = ("task.common.date.completed", TYPE_DATETIME, KIND_DEFAULT, "Closed:", True, False, False)
    NEW_COMMENT = ("task.common.comment.new", TYPE_LONG_RICH_TEXT, None, "New Comment:", False, False, True)

    def __init__(
        self,
        attr_id: str,
        attr_type: str,
        kind: str | None,
        label: str,
        read_only: bool,
        required_for_completeness: bool,
        init_field: bool,
    ) -> None:
        self.id = attr_id
        self.type = attr_type
        self.kind = kind
        self.label = label
        self.read_only = read_only
        self.required_for_completeness = required_for_completeness
        self.init_field = init_field

    def is_required_for_completeness(self) -> bool:
        return self.required_for_completeness

    def is_init_field(self) -> bool:
        return self.init_field

    @classmethod
    def by_id(cls, attr_id: str) -> GitHubTaskAttribute | None:
        return _ATTRIBUTES_BY_ID.get(attr_id)

    @classmethod
    def required_attributes(cls) -> list[GitHubTaskAttribute]:
        return [a for a in cls if a.required_for_completeness]

    @classmethod
    def init_attributes(cls) -> list[GitHubTaskAttribute]:
        return [a for a in cls if a.init_field]


_ATTRIBUTES_BY_ID = {a.id: a for a in GitHubTaskAttribute}


class TaskOperation(enum.Enum):
    """Lifecycle operations offered on an existing issue."""

    LEAVE = ("leave", "Leave as ")
    CLOSE = ("close", "Close")
    REOPEN = ("reopen", "Reopen")

    def __init__(self, op_id: str, label: str) -> None:
        self.id = op_id
        self.label_template = label

    def label_for(self, state: str | None) -> str:
        """Label to show for this operation given the issue's current state."""
        if self is TaskOperation.LEAVE:
            return self.label_template + (state or "")
        return self.label_template

    @classmethod
    def from_id(cls, op_id: str) -> TaskOperation:
        try:
            return _OPERATIONS_BY_ID[op_id]
        except KeyError:
            raise ValueError(f"Unknown task operation: {op_id!r}") from None


_OPERATIONS_BY_ID = {op.id: op for op in TaskOperation}


def operations_for_state(state: str | None) -> list[tuple[TaskOperation, bool]]:
    """Operations legal for an issue in ``state``, each with its default flag."""
    if state == "open":
        return [(TaskOperation.LEAVE, True), (TaskOperation.CLOSE, False)]
    if state == "closed":
        return [(TaskOperation.LEAVE, True), (TaskOperation.REOPEN, False)]
    return []
