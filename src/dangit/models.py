"""Data models for dangit."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# API links come in two shapes:
#   https://api.github.com/repos/{owner}/{repo}/...   (github.com)
#   https://{host}/api/v3/repos/{owner}/{repo}/...    (GitHub Enterprise)
_API_PREFIX_PATTERN = re.compile(
    r"^(?P<scheme>https?://)(?:api\.(?P<host>[^/]+)|(?P<ghe_host>[^/]+)/api/v3)/repos/"
)
# Only the segment right after {host}/{owner}/{repo} names the resource type
_PULLS_SEGMENT_PATTERN = re.compile(r"^(https?://[^/]+/[^/]+/[^/]+)/pulls/")


def web_url(api_url: str) -> str:
    """Convert a REST API link into the page a human would open.

    Example: https://api.github.com/repos/release-plz/release-plz/issues/1852
          -> https://github.com/release-plz/release-plz/issues/1852
    Example: https://api.github.com/repos/rust-lang/rust/pulls/132721
          -> https://github.com/rust-lang/rust/pull/132721

    Links that are already public pass through unchanged, so an owner or
    repository that happens to be called ``pulls`` keeps its name.
    """
    match = _API_PREFIX_PATTERN.match(api_url)
    if not match:
        return api_url
    host = match.group("host") or match.group("ghe_host")
    url = f"{match.group('scheme')}{host}/" + api_url[match.end():]
    return _PULLS_SEGMENT_PATTERN.sub(r"\1/pull/", url, count=1)


class ItemKind(Enum):
    """Whether a work item is an issue or a pull request."""
    ISSUE = "issue"
    PULL_REQUEST = "pr"

    @property
    def label(self) -> str:
        return "Issue" if self is ItemKind.ISSUE else "PR"

    @property
    def glyph(self) -> str:
        return "⊙" if self is ItemKind.ISSUE else "↶"


@dataclass(frozen=True)
class WorkItem:
    """An open issue or pull request.

    Two items are the same item when they share a URL, regardless of the
    other fields. The URL is the fingerprint used for deduplication.
    """

    url: str
    title: str = field(compare=False)
    repository: str = field(compare=False)
    kind: ItemKind = field(default=ItemKind.ISSUE, compare=False)

    @classmethod
    def from_node(cls, node: dict[str, Any], kind: ItemKind) -> "WorkItem":
        """Build from a GraphQL search node (``title``, ``url``, ``repository.name``)."""
        return cls(
            url=node["url"],
            title=node["title"],
            repository=node["repository"]["name"],
            kind=kind,
        )

    @property
    def label(self) -> str:
        return f"{self.kind.glyph} {self.title}"

    def __str__(self) -> str:
        return f"{self.repository}: {self.title} → {self.url}"


@dataclass(frozen=True)
class Notification:
    """An unread notification thread."""

    title: str
    subject_api_url: str
    latest_comment_api_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Notification":
        """Build from a REST ``/notifications`` entry."""
        subject = data["subject"]
        return cls(
            title=subject["title"],
            # Some subjects (e.g. check suites) carry no link at all
            subject_api_url=subject.get("url") or "",
            latest_comment_api_url=subject.get("latest_comment_url"),
        )

    @property
    def html_url(self) -> str:
        return web_url(self.subject_api_url)

    def __str__(self) -> str:
        return f"{self.title} → {self.html_url}"


class Tab(Enum):
    """Top-level dashboard views, in display order."""
    NOTIFICATIONS = "notifications"
    ISSUES = "issues"
    PULL_REQUESTS = "pull_requests"

    @property
    def label(self) -> str:
        return _TAB_LABELS[self]

    def next(self) -> "Tab":
        return _NEXT_TAB[self]


_TAB_LABELS = {
    Tab.NOTIFICATIONS: "Notifications",
    Tab.ISSUES: "Issues",
    Tab.PULL_REQUESTS: "Pull Requests",
}

_NEXT_TAB = {
    Tab.NOTIFICATIONS: Tab.ISSUES,
    Tab.ISSUES: Tab.PULL_REQUESTS,
    Tab.PULL_REQUESTS: Tab.NOTIFICATIONS,
}
