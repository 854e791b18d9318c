"""Textual TUI for dangit."""

from __future__ import annotations

import time
from typing import Callable

from rich.cells import cell_len
from rich.text import Text as RichText
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Static

from .gate import TransitionGate
from .loop import DEFAULT_TICK, EventLoop, QueueInput, open_in_browser
from .navigation import DashboardState, DashboardView, Snapshot

HIGHLIGHT_SYMBOL = "👉 "

CSS = """
#tab-bar {
    height: 3;
    border: round $primary;
    border-title-color: $accent;
    padding: 0 1;
}

#main-content {
    height: 1fr;
}

.pane {
    height: 1fr;
    border: round $primary;
    padding: 0 1;
}

#left-pane {
    width: 1fr;
}

#right-pane {
    width: 2fr;
}
"""


def render_list(labels: tuple[str, ...], selection: int | None, empty: str = "Nothing here") -> RichText:
    """Paint a list with the selected row reversed, italic and pointed at."""
    if not labels:
        return RichText(empty, style="dim")
    text = RichText()
    pad = " " * cell_len(HIGHLIGHT_SYMBOL)
    for i, label in enumerate(labels):
        if i:
            text.append("\n")
        if i == selection:
            text.append(HIGHLIGHT_SYMBOL + label, style="reverse italic")
        else:
            text.append(pad + label)
    return text


def render_tabs(view: DashboardView) -> RichText:
    text = RichText()
    for i, label in enumerate(view.tabs):
        if i:
            text.append(" · ", style="dim")
        text.append(label, style="bold yellow" if i == view.tab_index else "white")
    return text


class DashboardRenderer:
    """Paints :class:`DashboardView` frames onto the app's widgets."""

    def __init__(self, app: DashboardApp) -> None:
        self.app = app
        self.last_view: DashboardView | None = None

    def render(self, view: DashboardView) -> None:
        app = self.app
        self.last_view = view
        app.query_one("#tab-bar", Static).update(render_tabs(view))

        left = app.query_one("#left-pane", Static)
        left.border_title = view.left_title
        left.update(render_list(view.left, view.selection))

        right = app.query_one("#right-pane", Static)
        right.display = view.right is not None
        if view.right is not None:
            right.border_title = view.right_title
            right.update(render_list(view.right, None))

        # Fade the lists in while a transition plays
        main = app.query_one("#main-content", Horizontal)
        main.styles.opacity = 1.0 if view.effect is None else view.effect

    def report(self, message: str) -> None:
        self.app.notify(message, severity="warning", timeout=3)


class DashboardApp(App):
    """Textual TUI for dangit.

    Key presses are not handled here: priority bindings push the key name
    into a queue, and the event loop (running as a worker) reads from it.
    """

    CSS = CSS

    BINDINGS = [
        Binding("q", "key_input('q')", "Quit", priority=True),
        Binding("escape", "key_input('escape')", "Quit", show=False, priority=True),
        Binding("tab", "key_input('tab')", "Next tab", priority=True),
        Binding("l", "key_input('l')", "Next tab", show=False, priority=True),
        Binding("right", "key_input('right')", "Next tab", show=False, priority=True),
        Binding("j", "key_input('j')", "Down", show=False, priority=True),
        Binding("down", "key_input('down')", "Down", show=False, priority=True),
        Binding("k", "key_input('k')", "Up", show=False, priority=True),
        Binding("up", "key_input('up')", "Up", show=False, priority=True),
        Binding("enter", "key_input('enter')", "Open", priority=True),
        Binding("o", "key_input('o')", "Open", show=False, priority=True),
    ]

    def __init__(
        self,
        snapshot: Snapshot,
        transition_duration: float = 0.0,
        tick: float = DEFAULT_TICK,
        opener: Callable[[str], None] = open_in_browser,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.title = "dangit!"
        self.state = DashboardState(snapshot, gate=TransitionGate(clock=clock))
        self.key_input = QueueInput()
        self.dashboard_renderer = DashboardRenderer(self)
        self._event_loop = EventLoop(
            self.state,
            self.key_input,
            self.dashboard_renderer,
            opener=opener,
            tick=tick,
            transition_duration=transition_duration,
        )

    def compose(self) -> ComposeResult:
        tab_bar = Static(id="tab-bar")
        tab_bar.border_title = "dangit!"
        yield tab_bar
        with Horizontal(id="main-content"):
            yield Static(id="left-pane", classes="pane")
            yield Static(id="right-pane", classes="pane")
        yield Footer()

    def on_mount(self) -> None:
        self.run_worker(self._run_event_loop(), name="event-loop", exclusive=True)

    async def _run_event_loop(self) -> None:
        await self._event_loop.run()
        self.exit()

    def action_key_input(self, key: str) -> None:
        """Hand a key press to the event loop."""
        self.key_input.push(key)
