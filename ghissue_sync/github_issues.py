"""Client for the GitHub v2 issues API (form-encoded POST/GET, JSON replies)."""

from __future__ import annotations

import enum
import json
import logging
from urllib.parse import quote

from .exceptions import GitHubServiceError, PermissionDeniedError, TransportError
from .models import Credentials, RemoteComment, RemoteIssue
from .transport import HttpTransport, TransportResponse

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://github.com/api/v2/json/"

UNEXPECTED_RESPONSE = "Unexpected server response"


class IssueAction(enum.Enum):
    """Remote issue actions, mapped to their API path fragments."""

    LIST = "issues/list"
    SEARCH = "issues/search"
    SHOW = "issues/show"
    OPEN = "issues/open"
    EDIT = "issues/edit"
    CLOSE = "issues/close"
    REOPEN = "issues/reopen"
    COMMENTS = "issues/comments"
    COMMENT = "issues/comment"
    ADD_LABEL = "issues/label/add"
    REMOVE_LABEL = "issues/label/remove"
    USER_EMAILS = "user/emails"


class IssueTransition(enum.Enum):
    """State changes the tracker accepts for an existing issue."""

    OPEN = IssueAction.REOPEN
    CLOSE = IssueAction.CLOSE


class GitHubIssueClient:
    """Client for reading and writing issues on a GitHub repository."""

    def __init__(
        self,
        transport: HttpTransport | None = None,
        base_url: str = GITHUB_API_BASE,
    ) -> None:
        self.transport = transport or HttpTransport()
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"

    def _url(self, action: IssueAction, *segments: str) -> str:
        path = "/".join([action.value, *(quote(str(s), safe="") for s in segments)])
        return self.base_url + path

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _post(
        self,
        url: str,
        credentials: Credentials,
        body: str | None = None,
        title: str | None = None,
        extra: list[tuple[str, str]] | None = None,
    ) -> TransportResponse:
        """POST login/token (plus optional body and title) and check the status."""
        fields = [("login", credentials.username), ("token", credentials.api_token)]
        if body is not None:
            fields.append(("body", body))
        if title is not None:
            fields.append(("title", title))
        if extra:
            fields.extend(extra)
        try:
            resp = self.transport.send_form(url, fields)
        except TransportError as e:
            raise GitHubServiceError(str(e)) from e
        logger.debug("URL: %s", url)
        logger.debug("Response: %s", resp.text)
        _check_status(resp)
        return resp

    def _get(self, url: str) -> TransportResponse:
        try:
            resp = self.transport.send_get(url)
        except TransportError as e:
            raise GitHubServiceError(str(e)) from e
        logger.debug("URL: %s", url)
        logger.debug("Response: %s", resp.text)
        _check_status(resp)
        return resp

    def _post_for_issue(
        self,
        url: str,
        credentials: Credentials,
        body: str | None = None,
        title: str | None = None,
    ) -> RemoteIssue:
        resp = self._post(url, credentials, body=body, title=title)
        payload = _decode(resp)
        issue = payload.get("issue") if isinstance(payload, dict) else None
        if not isinstance(issue, dict) or not issue:
            logger.error("%s: %s", UNEXPECTED_RESPONSE, resp.text)
            raise GitHubServiceError(UNEXPECTED_RESPONSE)
        return RemoteIssue.from_dict(issue)

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def verify_credentials(self, credentials: Credentials) -> bool:
        """Return True if the tracker accepts these credentials.

        A 401/403 answer is reported as False rather than raised; any other
        failure still raises GitHubServiceError.
        """
        try:
            self._post(self._url(IssueAction.USER_EMAILS), credentials)
        except PermissionDeniedError:
            return False
        return True

    # ------------------------------------------------------------------
    # Read issues
    # ------------------------------------------------------------------

    def search_issues(
        self,
        user: str,
        repo: str,
        state: str,
        search_term: str,
        credentials: Credentials,
    ) -> list[RemoteIssue]:
        """List issues in ``state``, or search them when a term is given."""
        if not (search_term or "").strip():
            url = self._url(IssueAction.LIST, user, repo, state)
        else:
            url = self._url(IssueAction.SEARCH, user, repo, state, search_term)

        issues = _decode_records(self._post(url, credentials), "issues")
        return [RemoteIssue.from_dict(i) for i in issues]

    def show_issue(
        self, user: str, repo: str, issue_number: str, credentials: Credentials
    ) -> RemoteIssue:
        return self._post_for_issue(
            self._url(IssueAction.SHOW, user, repo, issue_number), credentials
        )

    def get_issue_comments(
        self, user: str, repo: str, issue_number: str
    ) -> list[RemoteComment]:
        """Fetch the comments on an issue. A reply without a comment list means none."""
        resp = self._get(self._url(IssueAction.COMMENTS, user, repo, issue_number))
        comments = _decode_records(resp, "comments")
        return [RemoteComment.from_dict(c) for c in comments]

    # ------------------------------------------------------------------
    # Write issues
    # ------------------------------------------------------------------

    def open_issue(
        self, user: str, repo: str, issue: RemoteIssue, credentials: Credentials
    ) -> RemoteIssue:
        """Create a new issue from ``issue``'s title and body."""
        return self._post_for_issue(
            self._url(IssueAction.OPEN, user, repo),
            credentials,
            body=issue.body,
            title=issue.title,
        )

    def edit_issue(
        self, user: str, repo: str, issue: RemoteIssue, credentials: Credentials
    ) -> RemoteIssue:
        """Push ``issue``'s title and body to the existing issue ``issue.number``."""
        return self._post_for_issue(
            self._url(IssueAction.EDIT, user, repo, _require_number(issue)),
            credentials,
            body=issue.body,
            title=issue.title,
        )

    def change_issue_state(
        self,
        user: str,
        repo: str,
        issue: RemoteIssue,
        transition: IssueTransition,
        credentials: Credentials,
    ) -> RemoteIssue:
        return self._post_for_issue(
            self._url(transition.value, user, repo, _require_number(issue)),
            credentials,
        )

    def reopen_issue(
        self, user: str, repo: str, issue: RemoteIssue, credentials: Credentials
    ) -> RemoteIssue:
        """Edit the issue, then reopen it. The two calls are not atomic."""
        issue = self.edit_issue(user, repo, issue, credentials)
        return self.change_issue_state(
            user, repo, issue, IssueTransition.OPEN, credentials
        )

    def close_issue(
        self, user: str, repo: str, issue: RemoteIssue, credentials: Credentials
    ) -> RemoteIssue:
        """Edit the issue, then close it. The two calls are not atomic."""
        issue = self.edit_issue(user, repo, issue, credentials)
        return self.change_issue_state(
            user, repo, issue, IssueTransition.CLOSE, credentials
        )

    def add_comment(
        self,
        user: str,
        repo: str,
        issue_number: str,
        comment: str,
        credentials: Credentials,
    ) -> RemoteComment | None:
        """Append a comment to an issue. Returns the stored comment if echoed back."""
        resp = self._post(
            self._url(IssueAction.COMMENT, user, repo, issue_number),
            credentials,
            extra=[("comment", comment)],
        )
        try:
            payload = json.loads(resp.text)
        except ValueError:
            return None
        stored = payload.get("comment") if isinstance(payload, dict) else None
        return RemoteComment.from_dict(stored) if isinstance(stored, dict) else None

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def add_label(
        self,
        user: str,
        repo: str,
        label: str,
        issue_number: str,
        credentials: Credentials,
    ) -> bool:
        """Add ``label``; True if the tracker's reply lists it."""
        resp = self._post(
            self._url(IssueAction.ADD_LABEL, user, repo, label, issue_number),
            credentials,
        )
        return label in resp.text

    def remove_label(
        self,
        user: str,
        repo: str,
        label: str,
        issue_number: str,
        credentials: Credentials,
    ) -> bool:
        """Remove ``label``; True if the tracker's reply no longer lists it."""
        resp = self._post(
            self._url(IssueAction.REMOVE_LABEL, user, repo, label, issue_number),
            credentials,
        )
        return label not in resp.text

    def close(self) -> None:
        """Close the underlying transport."""
        self.transport.close()


def _check_status(resp: TransportResponse) -> None:
    if resp.status_code in (200, 201):
        return
    if resp.status_code in (401, 403):
        raise PermissionDeniedError(resp.status_line, status_line=resp.status_line)
    raise GitHubServiceError(resp.status_line, status_line=resp.status_line)


def _decode(resp: TransportResponse) -> object:
    try:
        return json.loads(resp.text)
    except ValueError as e:
        logger.error("%s: %s", UNEXPECTED_RESPONSE, resp.text)
        raise GitHubServiceError(f"{UNEXPECTED_RESPONSE}: {e}") from e


def _require_number(issue: RemoteIssue) -> str:
    if issue.number is None:
        raise ValueError("Issue has no number; open it before editing")
    return issue.number


def _decode_records(resp: TransportResponse, key: str) -> list[dict]:
    """Decode the ``key`` array of an envelope. A missing array means no records."""
    payload = _decode(resp)
    records = payload.get(key) if isinstance(payload, dict) else None
    if records is None:
        return []
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        logger.error("%s: %s", UNEXPECTED_RESPONSE, resp.text)
        raise GitHubServiceError(UNEXPECTED_RESPONSE)
    return records
