"""Merge the fetched work-item collections into one repository-grouped view."""

from itertools import chain
from typing import Iterable

from .models import WorkItem

# repository name -> items, keys in lexicographic order
AggregatedView = dict[str, list[WorkItem]]


def aggregate(
    created_issues: Iterable[WorkItem],
    assigned_issues: Iterable[WorkItem],
    created_prs: Iterable[WorkItem],
    assigned_prs: Iterable[WorkItem],
) -> AggregatedView:
    """Deduplicate by URL and group by repository.

    Collections are scanned in argument order and the first occurrence of a
    URL wins, so an issue you both created and are assigned to is reported
    with its created-issues record.
    """
    seen: set[str] = set()
    grouped: dict[str, list[WorkItem]] = {}
    for item in chain(created_issues, assigned_issues, created_prs, assigned_prs):
        if item.url in seen:
            continue
        seen.add(item.url)
        grouped.setdefault(item.repository, []).append(item)
    return {repo: grouped[repo] for repo in sorted(grouped)}


def repo_list(view: AggregatedView) -> list[str]:
    """Repository names of a view, sorted."""
    return sorted(view)


def items_for_repo(view: AggregatedView, repo: str) -> list[WorkItem]:
    """Items of one repository; empty for an unknown repository."""
    return list(view.get(repo, ()))
