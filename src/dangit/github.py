"""GitHub access for dangit: credentials, search and notifications."""

import logging
import os
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests

from .config import DEFAULT_API_URL, DEFAULT_NOTIFICATIONS_PER_PAGE
from .models import ItemKind, Notification, WorkItem
from .navigation import Snapshot

logger = logging.getLogger(__name__)

USER_AGENT = "dangit"
REQUEST_TIMEOUT = 30
SEARCH_PAGE_SIZE = 100
MAX_SEARCH_PAGES = 10  # hard stop at 1000 results per search

_SEARCH_QUERY = """
query Search($query: String!, $cursor: String) {
  search(first: %d, type: ISSUE, query: $query, after: $cursor) {
    issueCount
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        ... on Issue {
          title
          url
          repository {
            name
          }
        }
        ... on PullRequest {
          title
          url
          repository {
            name
          }
        }
      }
    }
  }
}
""" % SEARCH_PAGE_SIZE


class FetchError(Exception):
    """Raised when data could not be fetched from GitHub (network, HTTP, parse)."""


class AuthError(FetchError):
    """Raised when no token is available or GitHub rejects it."""


def get_token() -> str:
    """Find a GitHub token.

    Checks ``GITHUB_TOKEN`` and ``GH_TOKEN``, then asks the gh CLI.

    Raises:
        AuthError: If no token could be found.
    """
    for name in ("GITHUB_TOKEN", "GH_TOKEN"):
        token = os.getenv(name, "").strip()
        if token:
            logger.debug(f"Using token from {name}")
            return token

    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True, text=True, timeout=10,
        )
    except FileNotFoundError as exc:
        raise AuthError("gh is not installed; log in with gh or set GITHUB_TOKEN") from exc
    except (subprocess.TimeoutExpired, OSError) as exc:
        raise AuthError(f"failed to run gh: {exc}") from exc

    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise AuthError(stderr or "gh auth token failed; run `gh auth login`")

    token = result.stdout.strip()
    if not token:
        raise AuthError("gh returned an empty token; run `gh auth login`")
    return token


def graphql_url(api_url: str) -> str:
    """GraphQL endpoint for a REST API root.

    https://api.github.com -> https://api.github.com/graphql
    https://ghe.example.com/api/v3 -> https://ghe.example.com/api/graphql
    """
    api_url = api_url.rstrip("/")
    if api_url.endswith("/v3"):
        return api_url[: -len("/v3")] + "/graphql"
    return api_url + "/graphql"


class GitHubClient:
    """Fetches the current user's open issues, pull requests and notifications."""

    def __init__(
        self,
        token: str,
        organization: str | None = None,
        api_url: str = DEFAULT_API_URL,
        notifications_per_page: int = DEFAULT_NOTIFICATIONS_PER_PAGE,
        session: requests.Session | None = None,
    ) -> None:
        self.organization = organization
        self.api_url = api_url.rstrip("/")
        self.notifications_per_page = notifications_per_page
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "User-Agent": USER_AGENT,
        })

    def __repr__(self) -> str:
        # Never show the token
        return f"GitHubClient(api_url={self.api_url!r}, organization={self.organization!r})"

    def assigned_issues(self) -> list[WorkItem]:
        return self._search(ItemKind.ISSUE, "assignee")

    def created_issues(self) -> list[WorkItem]:
        return self._search(ItemKind.ISSUE, "author")

    def assigned_prs(self) -> list[WorkItem]:
        return self._search(ItemKind.PULL_REQUEST, "assignee")

    def created_prs(self) -> list[WorkItem]:
        return self._search(ItemKind.PULL_REQUEST, "author")

    def notifications(self) -> list[Notification]:
        # all=false returns unread notifications only. GitHub offers no way to
        # ask for "not done" notifications.
        data = self._request(
            "GET",
            f"{self.api_url}/notifications",
            params={"per_page": self.notifications_per_page, "all": "false"},
        )
        if not isinstance(data, list):
            raise FetchError("unexpected notifications payload")
        try:
            return [Notification.from_api(entry) for entry in data]
        except (KeyError, TypeError) as exc:
            raise FetchError(f"malformed notification: {exc}") from exc

    def search_query(self, kind: ItemKind, role: str) -> str:
        """Search string for open items of ``kind`` where ``role`` is the current user."""
        is_filter = "issue" if kind is ItemKind.ISSUE else "pr"
        query = f"state:open is:{is_filter} {role}:@me"
        if self.organization:
            query = f"org:{self.organization} {query}"
        return query

    def _search(self, kind: ItemKind, role: str) -> list[WorkItem]:
        query = self.search_query(kind, role)
        items: list[WorkItem] = []
        cursor: str | None = None

        for _ in range(MAX_SEARCH_PAGES):
            data = self._request(
                "POST",
                graphql_url(self.api_url),
                json={"query": _SEARCH_QUERY, "variables": {"query": query, "cursor": cursor}},
            )
            if not isinstance(data, dict):
                raise FetchError(f"unexpected search payload for {query!r}")
            if data.get("errors"):
                messages = "; ".join(e.get("message", "?") for e in data["errors"])
                raise FetchError(f"search {query!r} failed: {messages}")
            try:
                search = data["data"]["search"]
                for edge in search["edges"]:
                    node = edge.get("node") or {}
                    # Results that match neither fragment come back empty
                    if "url" not in node:
                        continue
                    items.append(WorkItem.from_node(node, kind))
                page_info = search.get("pageInfo") or {}
            except (KeyError, TypeError) as exc:
                raise FetchError(f"malformed search response for {query!r}: {exc}") from exc

            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

        logger.debug(f"Search {query!r} returned {len(items)} items")
        return items

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = self._session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"{method} {url} failed: {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthError(f"GitHub rejected the token (HTTP {response.status_code})")
        if not response.ok:
            raise FetchError(f"{method} {url} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(f"{method} {url} returned invalid JSON") from exc


def fetch_snapshot(client: GitHubClient) -> Snapshot:
    """Fetch everything the dashboard shows, in parallel.

    Raises:
        FetchError: If any of the fetches fails.
    """
    start = time.monotonic()
    with ThreadPoolExecutor(max_workers=5) as pool:
        created_issues = pool.submit(client.created_issues)
        assigned_issues = pool.submit(client.assigned_issues)
        created_prs = pool.submit(client.created_prs)
        assigned_prs = pool.submit(client.assigned_prs)
        notifications = pool.submit(client.notifications)

        snapshot = Snapshot(
            created_issues=tuple(created_issues.result()),
            assigned_issues=tuple(assigned_issues.result()),
            created_prs=tuple(created_prs.result()),
            assigned_prs=tuple(assigned_prs.result()),
            notifications=tuple(notifications.result()),
        )

    item_count = sum(len(items) for items in snapshot.all_view.values())
    logger.info(
        f"Fetched {len(snapshot.notifications)} notifications and {item_count} work items "
        f"in {time.monotonic() - start:.2f}s"
    )
    return snapshot
