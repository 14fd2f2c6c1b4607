"""CLI entry point for ghissue-sync."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .attributes import GitHubTaskAttribute, TaskOperation
from .config import Settings, load_settings
from .exceptions import GitHubServiceError, SynchronizationError
from .github_issues import GitHubIssueClient
from .repository import parse_repository_url, repository_url
from .sync import TaskDataHandler, fetch_task
from .transport import HttpTransport


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--login",
        type=str,
        default=None,
        help="GitHub login (or set GITHUB_LOGIN / GHISSUE_LOGIN env var)",
    )
    parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="GitHub API token (or set GITHUB_TOKEN / GHISSUE_TOKEN env var)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_repo(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "repo",
        type=str,
        help="Repository URL (https://github.com/<user>/<repo>) or <user>/<repo>",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghissue-sync",
        description="Read and update GitHub issues as generic task documents.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("verify", help="Check that the login and token are accepted")
    _add_common(p)

    p = sub.add_parser("search", help="List or search issues")
    _add_common(p)
    _add_repo(p)
    p.add_argument("--state", choices=["open", "closed"], default="open")
    p.add_argument("--term", type=str, default="", help="Search text (lists all if empty)")

    p = sub.add_parser("show", help="Fetch an issue as a task document")
    _add_common(p)
    _add_repo(p)
    p.add_argument("number", type=str, help="Issue number")
    p.add_argument(
        "--output-json",
        type=str,
        default=None,
        help="Write the task document to a JSON file",
    )

    p = sub.add_parser("post", help="Create an issue, or update an existing one")
    _add_common(p)
    _add_repo(p)
    p.add_argument("--number", type=str, default=None, help="Existing issue number")
    p.add_argument("--title", type=str, default=None)
    p.add_argument("--body", type=str, default=None)
    p.add_argument("--comment", type=str, default=None, help="Comment to add")
    p.add_argument(
        "--operation",
        choices=[op.id for op in TaskOperation],
        default=None,
        help="Lifecycle operation to apply to an existing issue",
    )

    p = sub.add_parser("label", help="Add or remove a label on an issue")
    _add_common(p)
    p.add_argument("action", choices=["add", "remove"])
    _add_repo(p)
    p.add_argument("number", type=str, help="Issue number")
    p.add_argument("label", type=str)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    try:
        settings = load_settings(login=args.login, token=args.token)
    except ValueError as e:
        logging.error("Invalid settings: %s", e)
        return 1
    credentials = settings.credentials
    if credentials is None:
        logging.error(
            "No GitHub credentials provided. Use --login/--token or set "
            "GITHUB_LOGIN / GITHUB_TOKEN"
        )
        return 1

    repo_url = None
    if getattr(args, "repo", None):
        repo_url = _normalize_repo(args.repo)
        if repo_url is None:
            logging.error("Not a GitHub repository: %s", args.repo)
            return 1

    client = _make_client(settings)
    try:
        return _run(args, client, credentials, repo_url)
    except (GitHubServiceError, SynchronizationError) as e:
        logging.error("%s", e)
        return 1
    finally:
        client.close()


def _make_client(settings: Settings) -> GitHubIssueClient:
    transport = HttpTransport(timeout=settings.timeout, proxies=settings.proxies)
    return GitHubIssueClient(transport=transport, base_url=settings.api_base)


def _normalize_repo(value: str) -> str | None:
    if "://" not in value and value.count("/") == 1:
        value = repository_url(*value.split("/"))
    try:
        parse_repository_url(value)
    except ValueError:
        return None
    return value


def _run(args, client, credentials, repo_url) -> int:
    if args.command == "verify":
        if client.verify_credentials(credentials):
            logging.info("Credentials accepted for %s", credentials.username)
            return 0
        logging.error("Credentials rejected for %s", credentials.username)
        return 1

    user, repo = parse_repository_url(repo_url)

    if args.command == "search":
        issues = client.search_issues(user, repo, args.state, args.term, credentials)
        for issue in issues:
            print(f"#{issue.number}\t{issue.state}\t{issue.title}")
        logging.info("Found %d issue(s)", len(issues))
        return 0

    if args.command == "show":
        doc = fetch_task(client, repo_url, args.number, credentials)
        print(f"#{doc.task_id} {doc.get_value(GitHubTaskAttribute.TITLE) or ''}")
        print(f"Status: {doc.get_value(GitHubTaskAttribute.STATUS) or '?'}")
        print(f"Created: {doc.get_value(GitHubTaskAttribute.CREATION_DATE) or '?'}")
        print(f"Comments: {len(doc.comments)}")
        print("Operations: " + ", ".join(op.label for op in doc.operations))
        if args.output_json:
            Path(args.output_json).write_text(json.dumps(doc.to_dict(), indent=2))
            logging.info("Task document written to %s", args.output_json)
        return 0

    if args.command == "post":
        handler = TaskDataHandler(client=client)
        if args.number:
            doc = fetch_task(client, repo_url, args.number, credentials)
        else:
            doc = handler.initialize_document(repo_url)
            if not args.title:
                logging.error("--title is required when creating an issue")
                return 1
        if args.title is not None:
            doc.set_value(GitHubTaskAttribute.TITLE, args.title)
        if args.body is not None:
            doc.set_value(GitHubTaskAttribute.BODY, args.body)
        if args.comment:
            doc.set_value(GitHubTaskAttribute.NEW_COMMENT, args.comment)
        if args.operation:
            doc.selected_operation = args.operation

        response = handler.apply_changes(doc, credentials)
        print(f"{response.kind.value} #{response.task_id}")
        return 0

    if args.command == "label":
        if args.action == "add":
            ok = client.add_label(user, repo, args.label, args.number, credentials)
        else:
            ok = client.remove_label(user, repo, args.label, args.number, credentials)
        if not ok:
            logging.warning("Could not %s label '%s' on #%s", args.action, args.label, args.number)
            return 1
        logging.info("Label '%s': %s on #%s done", args.label, args.action, args.number)
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
