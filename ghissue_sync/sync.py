"""Sync engine: posts edited task documents to GitHub and fetches them back."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from .attributes import GitHubTaskAttribute, TaskOperation
from .exceptions import GitHubServiceError, SynchronizationError
from .github_issues import GitHubIssueClient, IssueTransition
from .mapper import GitHubTaskDataMapper
from .models import Credentials, RemoteComment, RemoteIssue
from .repository import parse_repository_url
from .taskdata import TaskDocument

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    TaskOperation.CLOSE: IssueTransition.CLOSE,
    TaskOperation.REOPEN: IssueTransition.OPEN,
}


class ResponseKind(enum.Enum):
    TASK_CREATED = "created"
    TASK_UPDATED = "updated"


@dataclass
class RepositoryResponse:
    """Outcome of posting a task: whether it was created or updated, and its id."""

    kind: ResponseKind
    task_id: str | None


def post_changes(
    client: GitHubIssueClient,
    document: TaskDocument,
    credentials: Credentials,
    mapper: GitHubTaskDataMapper | None = None,
) -> RepositoryResponse:
    """Push a locally edited task document to the tracker.

    New documents are opened as issues. Existing ones are edited, get the
    pending new comment (if any) posted, and then have the selected
    operation applied. Each remote call is made once; nothing is retried.

    Args:
        client: GitHub issue client
        document: The edited task document
        credentials: Login and token to post with
        mapper: Mapper to build the issue with (a default one if omitted)

    Raises:
        SynchronizationError: If any tracker call fails
        ValueError: If the selected operation id is not a known operation
    """
    mapper = mapper or GitHubTaskDataMapper()
    issue = mapper.from_document(document)
    user, repo = parse_repository_url(document.repository_url)

    try:
        if document.is_new:
            created = client.open_issue(user, repo, issue, credentials)
            logger.info("Created issue #%s in %s/%s", created.number, user, repo)
            return RepositoryResponse(ResponseKind.TASK_CREATED, created.number)

        operation = mapper.selected_operation(document)

        client.edit_issue(user, repo, issue, credentials)

        new_comment = document.get_value(GitHubTaskAttribute.NEW_COMMENT)
        if new_comment:
            client.add_comment(user, repo, issue.number, new_comment, credentials)
            logger.debug("Added comment to issue #%s", issue.number)

        if operation is not None and operation is not TaskOperation.LEAVE:
            client.change_issue_state(
                user, repo, issue, _TRANSITIONS[operation], credentials
            )
            logger.info("Applied '%s' to issue #%s", operation.id, issue.number)

        logger.info("Updated issue #%s in %s/%s", issue.number, user, repo)
        return RepositoryResponse(ResponseKind.TASK_UPDATED, document.task_id)
    except GitHubServiceError as e:
        msg = f"Failed to post task {document.task_id or '(new)'} to {user}/{repo}: {e}"
        logger.error(msg)
        raise SynchronizationError(msg, cause=e) from e


def fetch_task(
    client: GitHubIssueClient,
    repository_url: str,
    issue_number: str,
    credentials: Credentials,
    is_full_fetch: bool = True,
    mapper: GitHubTaskDataMapper | None = None,
) -> TaskDocument:
    """Fetch an issue and its comments as a task document."""
    mapper = mapper or GitHubTaskDataMapper()
    user, repo = parse_repository_url(repository_url)
    issue = client.show_issue(user, repo, issue_number, credentials)
    comments = client.get_issue_comments(user, repo, issue_number)
    logger.debug("Fetched issue #%s with %d comment(s)", issue_number, len(comments))
    return mapper.to_document(repository_url, issue, comments, is_full_fetch)


@dataclass
class TaskDataHandler:
    """What the host task model needs from this connector, injected by the host."""

    client: GitHubIssueClient
    mapper: GitHubTaskDataMapper = field(default_factory=GitHubTaskDataMapper)

    @property
    def attribute_mapper(self) -> type[GitHubTaskAttribute]:
        return GitHubTaskAttribute

    def build_document(
        self,
        repository_url: str,
        issue: RemoteIssue,
        comments: list[RemoteComment] | None = None,
        is_full_fetch: bool = True,
    ) -> TaskDocument:
        return self.mapper.to_document(repository_url, issue, comments, is_full_fetch)

    def initialize_document(self, repository_url: str) -> TaskDocument:
        return self.mapper.initialize_new_document(TaskDocument(repository_url=repository_url))

    def apply_changes(
        self, document: TaskDocument, credentials: Credentials
    ) -> RepositoryResponse:
        return post_changes(self.client, document, credentials, self.mapper)
