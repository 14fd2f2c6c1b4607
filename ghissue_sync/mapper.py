"""Conversion between GitHub issues and generic task documents."""

from __future__ import annotations

import logging
from datetime import datetime

from .attributes import GitHubTaskAttribute, TaskOperation, operations_for_state
from .models import RemoteComment, RemoteIssue
from .taskdata import DATA_VERSION, OperationEntry, TaskComment, TaskDocument

logger = logging.getLogger(__name__)

# e.g. "2010/02/02 22:58:39 -0800"
GITHUB_DATE_FORMAT = "%Y/%m/%d %H:%M:%S %z"
# Keeps the UTC offset so a display value converts back to the exact remote string
DISPLAY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def parse_github_date(value: str | None) -> datetime | None:
    """Parse a tracker timestamp, or return None if it isn't one."""
    if not value or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), GITHUB_DATE_FORMAT)
    except ValueError:
        logger.debug("Unparsable GitHub date %r", value)
        return None


def to_display_date(value: str | None) -> str | None:
    """Convert a tracker timestamp for display; unparsable values pass through."""
    parsed = parse_github_date(value)
    if parsed is None:
        return value
    return parsed.strftime(DISPLAY_DATE_FORMAT)


def to_github_date(value: str | None) -> str | None:
    """Convert a display timestamp back to tracker format; unparsable values pass through."""
    if not value or not value.strip():
        return value
    try:
        parsed = datetime.strptime(value.strip(), DISPLAY_DATE_FORMAT)
    except ValueError:
        logger.debug("Unparsable display date %r", value)
        return value
    return parsed.strftime(GITHUB_DATE_FORMAT)


class GitHubTaskDataMapper:
    """Builds task documents from issues and issues from edited documents."""

    def to_document(
        self,
        repository_url: str,
        issue: RemoteIssue,
        comments: list[RemoteComment] | None = None,
        is_full_fetch: bool = True,
    ) -> TaskDocument:
        """Build a task document for ``issue`` and its comments.

        Only attributes with a value on the issue are created (plus the empty
        new-comment slot), so a document built from a sparse issue comes out
        partial. ``is_full_fetch=False`` marks the document partial regardless.
        """
        doc = TaskDocument(repository_url=repository_url, task_id=issue.number)
        doc.version = DATA_VERSION

        values = {
            GitHubTaskAttribute.KEY: issue.number,
            GitHubTaskAttribute.TITLE: issue.title,
            GitHubTaskAttribute.BODY: issue.body,
            GitHubTaskAttribute.STATUS: issue.state,
            GitHubTaskAttribute.CREATION_DATE: to_display_date(issue.created_at),
            GitHubTaskAttribute.MODIFICATION_DATE: to_display_date(issue.updated_at),
            GitHubTaskAttribute.CLOSED_DATE: to_display_date(issue.closed_at),
        }
        for attribute, value in values.items():
            if value is not None:
                doc.create_attribute(attribute, value)
        doc.create_attribute(GitHubTaskAttribute.NEW_COMMENT)

        for i, comment in enumerate(comments or [], start=1):
            doc.comments.append(
                TaskComment(
                    number=i,
                    author=comment.user,
                    text=comment.body,
                    creation_date=parse_github_date(comment.created_at),
                )
            )

        if not doc.is_new:
            self._add_operations(doc, issue.state)

        doc.partial = (not is_full_fetch) or self.is_partial(doc)
        return doc

    def is_partial(self, doc: TaskDocument) -> bool:
        """True if any attribute required for a complete task is missing."""
        return any(
            doc.get_attribute(attribute) is None
            for attribute in GitHubTaskAttribute.required_attributes()
        )

    def _add_operations(self, doc: TaskDocument, state: str | None) -> None:
        for operation, as_default in operations_for_state(state):
            doc.operations.append(
                OperationEntry(
                    id=operation.id,
                    label=operation.label_for(state),
                    is_default=as_default,
                )
            )
            if as_default:
                doc.selected_operation = operation.id

    def from_document(self, doc: TaskDocument) -> RemoteIssue:
        """Build the issue to send to the tracker from an edited document."""
        issue = RemoteIssue(
            title=doc.get_value(GitHubTaskAttribute.TITLE),
            body=doc.get_value(GitHubTaskAttribute.BODY),
            state=doc.get_value(GitHubTaskAttribute.STATUS),
            created_at=to_github_date(doc.get_value(GitHubTaskAttribute.CREATION_DATE)),
            updated_at=to_github_date(
                doc.get_value(GitHubTaskAttribute.MODIFICATION_DATE)
            ),
            closed_at=to_github_date(doc.get_value(GitHubTaskAttribute.CLOSED_DATE)),
        )
        if not doc.is_new:
            issue.number = doc.task_id
        return issue

    def initialize_new_document(self, doc: TaskDocument) -> TaskDocument:
        """Give a brand-new document empty slots for every editable field."""
        doc.version = DATA_VERSION
        for attribute in GitHubTaskAttribute.init_attributes():
            doc.create_attribute(attribute)
        return doc

    def selected_operation(self, doc: TaskDocument) -> TaskOperation | None:
        """Resolve the document's selected operation. Unknown ids raise ValueError."""
        if not doc.selected_operation:
            return None
        return TaskOperation.from_id(doc.selected_operation)
