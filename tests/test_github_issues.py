"""Tests for GitHubIssueClient with a mocked transport."""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from ghissue_sync.exceptions import (
    GitHubServiceError,
    PermissionDeniedError,
    TransportError,
)
from ghissue_sync.github_issues import GitHubIssueClient, IssueTransition
from ghissue_sync.models import Credentials, RemoteIssue
from ghissue_sync.transport import HttpTransport, TransportResponse

BASE = "https://github.com/api/v2/json/"
CREDS = Credentials("alice", "s3cret")

ISSUE_JSON = {
    "number": 7,
    "title": "Crash on start",
    "body": "It crashes.",
    "state": "open",
    "created_at": "2010/02/02 22:58:39 -0800",
    "updated_at": "2010/02/03 10:00:00 -0800",
    "closed_at": None,
}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resp(payload=None, status=200, reason="OK", text=None) -> TransportResponse:
    if text is None:
        text = json.dumps(payload) if payload is not None else ""
    return TransportResponse(status_code=status, body=text.encode(), reason=reason)


def _client(post=None, get=None) -> tuple[GitHubIssueClient, MagicMock]:
    transport = MagicMock(spec=HttpTransport)
    if post is not None:
        transport.send_form.return_value = post
    if get is not None:
        transport.send_get.return_value = get
    return GitHubIssueClient(transport=transport), transport


def _posted(transport: MagicMock, call: int = 0) -> tuple[str, list]:
    args = transport.send_form.call_args_list[call].args
    return args[0], args[1]


# ===================================================================
# Status handling
# ===================================================================


class TestStatusClassification:
    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses_raise_permission_denied(self, status):
        client, _ = _client(post=_resp(status=status, reason="Unauthorized"))

        with pytest.raises(PermissionDeniedError) as exc:
            client.open_issue("alice", "proj", RemoteIssue(title="t"), CREDS)

        assert exc.value.status_line == f"HTTP/1.1 {status} Unauthorized"

    def test_server_error_raises_service_error(self):
        client, _ = _client(post=_resp(status=500, reason="Internal Server Error"))

        with pytest.raises(GitHubServiceError) as exc:
            client.edit_issue("alice", "proj", RemoteIssue(number="7"), CREDS)

        assert not isinstance(exc.value, PermissionDeniedError)
        assert "500" in str(exc.value)

    def test_created_status_is_success(self):
        client, _ = _client(post=_resp({"issue": ISSUE_JSON}, status=201, reason="Created"))

        issue = client.open_issue("alice", "proj", RemoteIssue(title="t"), CREDS)

        assert issue.number == "7"

    def test_missing_issue_payload_is_unexpected_response(self):
        client, _ = _client(post=_resp({"error": "nope"}))

        with pytest.raises(GitHubServiceError, match="^Unexpected server response$"):
            client.open_issue("alice", "proj", RemoteIssue(title="t"), CREDS)

    @pytest.mark.parametrize("issue", ["not found", ["7"], 7])
    def test_non_object_issue_payload_is_unexpected_response(self, issue):
        client, _ = _client(post=_resp({"issue": issue}))

        with pytest.raises(GitHubServiceError, match="^Unexpected server response$"):
            client.show_issue("alice", "proj", "7", CREDS)

    def test_non_list_issues_is_unexpected_response(self):
        client, _ = _client(post=_resp({"issues": {"error": "x"}}))

        with pytest.raises(GitHubServiceError, match="^Unexpected server response$"):
            client.search_issues("alice", "proj", "open", "", CREDS)

    def test_failed_call_logs_response_body(self, caplog):
        client, _ = _client(post=_resp(text="rate limited", status=500, reason="Internal Server Error"))

        with caplog.at_level(logging.DEBUG, logger="ghissue_sync.github_issues"):
            with pytest.raises(GitHubServiceError):
                client.show_issue("alice", "proj", "7", CREDS)

        assert "Response: rate limited" in caplog.text

    def test_transport_failure_is_wrapped(self):
        client, transport = _client()
        transport.send_form.side_effect = TransportError("connection refused")

        with pytest.raises(GitHubServiceError) as exc:
            client.show_issue("alice", "proj", "7", CREDS)

        assert isinstance(exc.value.__cause__, TransportError)

    def test_undecodable_body_is_service_error(self):
        client, _ = _client(post=_resp(text="<html>oops</html>"))

        with pytest.raises(GitHubServiceError):
            client.search_issues("alice", "proj", "open", "", CREDS)


# ===================================================================
# Credentials
# ===================================================================


class TestVerifyCredentials:
    def test_accepted(self):
        client, transport = _client(post=_resp({"emails": ["a@example.com"]}))

        assert client.verify_credentials(CREDS) is True
        url, fields = _posted(transport)
        assert url == BASE + "user/emails"
        assert fields == [("login", "alice"), ("token", "s3cret")]

    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_returns_false(self, status):
        client, _ = _client(post=_resp(status=status, reason="Forbidden"))

        assert client.verify_credentials(CREDS) is False

    def test_other_failure_raises(self):
        client, _ = _client(post=_resp(status=502, reason="Bad Gateway"))

        with pytest.raises(GitHubServiceError):
            client.verify_credentials(CREDS)


# ===================================================================
# Reading
# ===================================================================


class TestSearchAndShow:
    def test_blank_term_lists_all(self):
        client, transport = _client(post=_resp({"issues": [ISSUE_JSON]}))

        issues = client.search_issues("alice", "proj", "open", "   ", CREDS)

        assert [i.number for i in issues] == ["7"]
        assert _posted(transport)[0] == BASE + "issues/list/alice/proj/open"

    def test_term_uses_search_endpoint(self):
        client, transport = _client(post=_resp({"issues": []}))

        issues = client.search_issues("alice", "proj", "closed", "null pointer", CREDS)

        assert issues == []
        assert _posted(transport)[0] == BASE + "issues/search/alice/proj/closed/null%20pointer"

    def test_show_issue_decodes_fields(self):
        client, transport = _client(post=_resp({"issue": ISSUE_JSON}))

        issue = client.show_issue("alice", "proj", "7", CREDS)

        assert _posted(transport)[0] == BASE + "issues/show/alice/proj/7"
        assert issue.title == "Crash on start"
        assert issue.state == "open"
        assert issue.created_at == "2010/02/02 22:58:39 -0800"
        assert issue.closed_at is None


class TestComments:
    def test_comments_are_decoded_in_order(self):
        payload = {
            "comments": [
                {"id": 1, "user": "alice", "body": "first", "created_at": "2010/02/02 22:58:39 -0800"},
                {"id": 2, "user": "bob", "body": "second", "created_at": "2010/02/03 08:00:00 -0800"},
            ]
        }
        client, transport = _client(get=_resp(payload))

        comments = client.get_issue_comments("alice", "proj", "7")

        transport.send_get.assert_called_once_with(BASE + "issues/comments/alice/proj/7")
        assert [c.user for c in comments] == ["alice", "bob"]
        assert comments[0].id == "1"

    def test_missing_comment_array_is_empty(self):
        client, _ = _client(get=_resp({}))

        assert client.get_issue_comments("alice", "proj", "7") == []

    def test_undecodable_comments_raise(self):
        client, _ = _client(get=_resp(text="not json"))

        with pytest.raises(GitHubServiceError):
            client.get_issue_comments("alice", "proj", "7")

    @pytest.mark.parametrize("comments", [{"error": "x"}, "none", ["just text"]])
    def test_malformed_comment_array_raises(self, comments):
        client, _ = _client(get=_resp({"comments": comments}))

        with pytest.raises(GitHubServiceError, match="^Unexpected server response$"):
            client.get_issue_comments("alice", "proj", "7")

    def test_add_comment_posts_comment_field(self):
        client, transport = _client(post=_resp({"comment": {"id": 9, "body": "hi", "user": "alice"}}))

        stored = client.add_comment("alice", "proj", "7", "hi", CREDS)

        url, fields = _posted(transport)
        assert url == BASE + "issues/comment/alice/proj/7"
        assert fields == [("login", "alice"), ("token", "s3cret"), ("comment", "hi")]
        assert stored.id == "9"


# ===================================================================
# Writing
# ===================================================================


class TestWrites:
    def test_open_issue_posts_body_then_title(self):
        client, transport = _client(post=_resp({"issue": ISSUE_JSON}))

        client.open_issue("alice", "proj", RemoteIssue(title="T", body="B"), CREDS)

        url, fields = _posted(transport)
        assert url == BASE + "issues/open/alice/proj"
        assert fields == [
            ("login", "alice"),
            ("token", "s3cret"),
            ("body", "B"),
            ("title", "T"),
        ]

    def test_edit_issue_targets_number(self):
        client, transport = _client(post=_resp({"issue": ISSUE_JSON}))

        client.edit_issue("alice", "proj", RemoteIssue(number="7", title="T"), CREDS)

        url, fields = _posted(transport)
        assert url == BASE + "issues/edit/alice/proj/7"
        assert ("title", "T") in fields
        assert all(key != "body" for key, _ in fields)

    @pytest.mark.parametrize(
        "transition, fragment",
        [(IssueTransition.CLOSE, "close"), (IssueTransition.OPEN, "reopen")],
    )
    def test_change_state(self, transition, fragment):
        client, transport = _client(post=_resp({"issue": ISSUE_JSON}))

        client.change_issue_state("alice", "proj", RemoteIssue(number="7"), transition, CREDS)

        url, fields = _posted(transport)
        assert url == BASE + f"issues/{fragment}/alice/proj/7"
        assert fields == [("login", "alice"), ("token", "s3cret")]

    def test_close_issue_edits_then_closes(self):
        client, transport = _client(post=_resp({"issue": ISSUE_JSON}))

        client.close_issue("alice", "proj", RemoteIssue(number="7", title="T"), CREDS)

        assert [c.args[0] for c in transport.send_form.call_args_list] == [
            BASE + "issues/edit/alice/proj/7",
            BASE + "issues/close/alice/proj/7",
        ]

    def test_reopen_failure_after_edit_is_not_rolled_back(self):
        client, transport = _client()
        transport.send_form.side_effect = [
            _resp({"issue": ISSUE_JSON}),
            _resp(status=500, reason="Internal Server Error"),
        ]

        with pytest.raises(GitHubServiceError):
            client.reopen_issue("alice", "proj", RemoteIssue(number="7"), CREDS)

        assert transport.send_form.call_count == 2


# ===================================================================
# Labels
# ===================================================================


class TestLabels:
    def test_add_label_success_when_label_echoed(self):
        client, transport = _client(post=_resp({"labels": ["bug", "ui"]}))

        assert client.add_label("alice", "proj", "bug", "7", CREDS) is True
        assert _posted(transport)[0] == BASE + "issues/label/add/alice/proj/bug/7"

    def test_add_label_failure_when_label_missing(self):
        client, _ = _client(post=_resp({"labels": ["ui"]}))

        assert client.add_label("alice", "proj", "bug", "7", CREDS) is False

    def test_remove_label_success_when_label_gone(self):
        client, transport = _client(post=_resp({"labels": ["ui"]}))

        assert client.remove_label("alice", "proj", "bug", "7", CREDS) is True
        assert _posted(transport)[0] == BASE + "issues/label/remove/alice/proj/bug/7"

    def test_remove_label_failure_when_label_still_present(self):
        client, _ = _client(post=_resp({"labels": ["bug"]}))

        assert client.remove_label("alice", "proj", "bug", "7", CREDS) is False
