"""Navigation state machine for the dashboard.

Navigation is a pure function of ``(state, command)``: :func:`step` returns
the next :class:`Navigation` plus an optional action for the event loop to
carry out (for example opening a link). :class:`DashboardState` is the single
owned value the event loop threads through its body.
"""

from dataclasses import InitVar, dataclass, field, replace
from enum import Enum
from functools import cached_property

from .aggregator import AggregatedView, aggregate, items_for_repo, repo_list
from .gate import TransitionGate
from .models import Notification, Tab, WorkItem


class Command(Enum):
    """Abstract input commands; front ends map their own keys onto these."""
    SELECT_NEXT = "select_next"
    SELECT_PREVIOUS = "select_previous"
    NEXT_TAB = "next_tab"
    ACTIVATE = "activate"
    QUIT = "quit"


@dataclass(frozen=True)
class OpenUrl:
    """Request to open a link in the browser."""
    url: str


# Only one kind of external action exists today
Action = OpenUrl


@dataclass(frozen=True)
class Snapshot:
    """Read-only copy of everything fetched at startup."""

    created_issues: tuple[WorkItem, ...] = ()
    assigned_issues: tuple[WorkItem, ...] = ()
    created_prs: tuple[WorkItem, ...] = ()
    assigned_prs: tuple[WorkItem, ...] = ()
    notifications: tuple[Notification, ...] = ()

    @cached_property
    def issues_view(self) -> AggregatedView:
        return aggregate(self.created_issues, self.assigned_issues, (), ())

    @cached_property
    def prs_view(self) -> AggregatedView:
        return aggregate((), (), self.created_prs, self.assigned_prs)

    @cached_property
    def all_view(self) -> AggregatedView:
        return aggregate(self.created_issues, self.assigned_issues, self.created_prs, self.assigned_prs)

    def view_for(self, tab: Tab) -> AggregatedView | None:
        """Grouped view behind a two-pane tab (None for Notifications)."""
        if tab is Tab.ISSUES:
            return self.issues_view
        if tab is Tab.PULL_REQUESTS:
            return self.prs_view
        return None

    def list_length(self, tab: Tab) -> int:
        """Length of the list the selection indexes on ``tab``."""
        view = self.view_for(tab)
        if view is None:
            return len(self.notifications)
        return len(view)


def _clamp(selection: int | None, length: int) -> int | None:
    if length <= 0:
        return None
    if selection is None:
        return None
    return max(0, min(selection, length - 1))


@dataclass(frozen=True)
class Navigation:
    """Which tab is active and which row is selected."""

    tab: Tab = Tab.NOTIFICATIONS
    selection: int | None = None
    running: bool = True

    @classmethod
    def initial(cls, snapshot: Snapshot) -> "Navigation":
        return cls(
            tab=Tab.NOTIFICATIONS,
            selection=0 if snapshot.notifications else None,
        )


def step(nav: Navigation, snapshot: Snapshot, command: Command) -> tuple[Navigation, Action | None]:
    """Apply one command. Never raises; commands on empty lists are no-ops."""
    if not nav.running:
        return nav, None

    if command is Command.QUIT:
        return replace(nav, running=False), None

    if command is Command.NEXT_TAB:
        tab = nav.tab.next()
        return replace(nav, tab=tab, selection=0 if snapshot.list_length(tab) else None), None

    length = snapshot.list_length(nav.tab)

    if command is Command.SELECT_NEXT:
        if not length:
            return replace(nav, selection=None), None
        selection = 0 if nav.selection is None else nav.selection + 1
        return replace(nav, selection=_clamp(selection, length)), None

    if command is Command.SELECT_PREVIOUS:
        if not length:
            return replace(nav, selection=None), None
        # Like a list widget: stepping back from nothing lands on the last row
        selection = length - 1 if nav.selection is None else nav.selection - 1
        return replace(nav, selection=_clamp(selection, length)), None

    if command is Command.ACTIVATE:
        selection = _clamp(nav.selection, length)
        if selection is None or nav.tab is not Tab.NOTIFICATIONS:
            # Row activation on Issues / Pull Requests has no action
            return nav, None
        url = snapshot.notifications[selection].html_url
        return nav, (OpenUrl(url) if url else None)

    return nav, None


@dataclass(frozen=True)
class DashboardView:
    """Everything the renderer needs to paint one frame."""

    tabs: tuple[str, ...]
    active_tab: Tab
    left_title: str
    left: tuple[str, ...]
    selection: int | None
    right_title: str | None = None
    right: tuple[str, ...] | None = None  # None: the tab has a single pane
    effect: float | None = None  # transition progress, 0.0..1.0

    @property
    def tab_index(self) -> int:
        return list(Tab).index(self.active_tab)


@dataclass
class DashboardState:
    """Owned dashboard state: data, navigation and the transition gate.

    ``start`` resumes from an existing position; without it the state begins
    at :meth:`Navigation.initial`.
    """

    snapshot: Snapshot
    gate: TransitionGate = field(default_factory=TransitionGate)
    start: InitVar[Navigation | None] = None
    nav: Navigation = field(init=False)

    def __post_init__(self, start: Navigation | None) -> None:
        self.nav = start if start is not None else Navigation.initial(self.snapshot)

    @property
    def running(self) -> bool:
        return self.nav.running

    @property
    def tab(self) -> Tab:
        return self.nav.tab

    @property
    def selection(self) -> int | None:
        return self.nav.selection

    def dispatch(self, command: Command) -> Action | None:
        self.nav, action = step(self.nav, self.snapshot, command)
        return action

    def selected_repo(self) -> str | None:
        view = self.snapshot.view_for(self.tab)
        if view is None or self.selection is None:
            return None
        repos = repo_list(view)
        if self.selection >= len(repos):
            return None
        return repos[self.selection]

    def right_pane_items(self) -> list[WorkItem]:
        view = self.snapshot.view_for(self.tab)
        repo = self.selected_repo()
        if view is None or repo is None:
            return []
        return items_for_repo(view, repo)

    def view(self) -> DashboardView:
        tabs = tuple(tab.label for tab in Tab)
        effect = self.gate.progress()
        grouped = self.snapshot.view_for(self.tab)

        if grouped is None:
            return DashboardView(
                tabs=tabs,
                active_tab=self.tab,
                left_title=f"Notifications ({len(self.snapshot.notifications)})",
                left=tuple(n.title for n in self.snapshot.notifications),
                selection=self.selection,
                effect=effect,
            )

        repo = self.selected_repo()
        return DashboardView(
            tabs=tabs,
            active_tab=self.tab,
            left_title="Repositories",
            left=tuple(repo_list(grouped)),
            selection=self.selection,
            right_title=repo or self.tab.label,
            right=tuple(item.label for item in self.right_pane_items()),
            effect=effect,
        )
