"""Tests for dangit.aggregator."""

from dangit.aggregator import aggregate, items_for_repo, repo_list
from dangit.models import ItemKind, WorkItem


def _item(url: str, repo: str, title: str = "", kind: ItemKind = ItemKind.ISSUE) -> WorkItem:
    return WorkItem(url=url, title=title or f"title {url}", repository=repo, kind=kind)


def _pr(url: str, repo: str, title: str = "") -> WorkItem:
    return _item(url, repo, title, ItemKind.PULL_REQUEST)


class TestAggregate:
    def test_scenario_overlap_and_second_repo(self):
        view = aggregate(
            [_item("a", "x")],
            [_item("a", "x")],
            [],
            [_pr("b", "y")],
        )
        assert list(view) == ["x", "y"]
        assert [i.url for i in view["x"]] == ["a"]
        assert [i.url for i in view["y"]] == ["b"]

    def test_empty_inputs(self):
        assert aggregate([], [], [], []) == {}

    def test_created_issue_wins_over_assigned(self):
        view = aggregate(
            [_item("a", "x", title="created version")],
            [_item("a", "x", title="assigned version")],
            [],
            [],
        )
        assert view["x"][0].title == "created version"

    def test_precedence_across_all_four(self):
        view = aggregate(
            [],
            [_item("u", "x", title="assigned issue")],
            [_pr("u", "x", title="created pr")],
            [_pr("u", "x", title="assigned pr")],
        )
        assert [i.title for i in view["x"]] == ["assigned issue"]

    def test_no_url_twice_and_nothing_lost(self):
        created_issues = [_item("1", "b"), _item("2", "a")]
        assigned_issues = [_item("2", "a"), _item("3", "c")]
        created_prs = [_pr("4", "a"), _pr("1", "b")]
        assigned_prs = [_pr("5", "c"), _pr("4", "a"), _pr("6", "b")]

        view = aggregate(created_issues, assigned_issues, created_prs, assigned_prs)
        urls = [i.url for items in view.values() for i in items]

        assert len(urls) == len(set(urls))
        every_input = created_issues + assigned_issues + created_prs + assigned_prs
        assert set(urls) == {i.url for i in every_input}

    def test_first_seen_order_within_repo(self):
        view = aggregate(
            [_item("3", "r")],
            [_item("1", "r"), _item("3", "r")],
            [_pr("2", "r")],
            [],
        )
        assert [i.url for i in view["r"]] == ["3", "1", "2"]

    def test_keys_sorted(self):
        view = aggregate([_item("1", "zeta"), _item("2", "Alpha"), _item("3", "beta")], [], [], [])
        assert list(view) == sorted(["zeta", "Alpha", "beta"])

    def test_accepts_tuples_and_generators(self):
        view = aggregate((_item("1", "r"),), (i for i in [_item("2", "r")]), (), ())
        assert [i.url for i in view["r"]] == ["1", "2"]

    def test_inputs_unchanged(self):
        created = [_item("a", "x")]
        aggregate(created, list(created), [], [])
        assert created == [_item("a", "x")]


class TestRepoList:
    def test_strictly_increasing(self):
        view = aggregate([_item("1", "c"), _item("2", "a"), _item("3", "b"), _item("4", "a")], [], [], [])
        repos = repo_list(view)
        assert repos == ["a", "b", "c"]
        assert all(x < y for x, y in zip(repos, repos[1:]))

    def test_empty(self):
        assert repo_list({}) == []


class TestItemsForRepo:
    def test_known_repo(self):
        view = aggregate([_item("1", "r"), _item("2", "s")], [], [], [])
        assert [i.url for i in items_for_repo(view, "r")] == ["1"]

    def test_unknown_repo_is_empty(self):
        view = aggregate([_item("1", "r")], [], [], [])
        assert items_for_repo(view, "nope") == []

    def test_returns_copy(self):
        view = aggregate([_item("1", "r")], [], [], [])
        items_for_repo(view, "r").clear()
        assert len(view["r"]) == 1
