"""The dashboard's event loop.

One coroutine owns the :class:`DashboardState`. Each iteration renders, then
either waits out a playing transition or reads exactly one input event and
routes it through the navigation state machine. The only suspension points
are the tick sleep and the wait for the next event.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Awaitable, Callable, Iterable, Protocol

from .navigation import Command, DashboardState, DashboardView, OpenUrl

logger = logging.getLogger(__name__)

# ~60 frames per second while a transition plays
DEFAULT_TICK = 0.016

KEYMAP: dict[str, Command] = {
    "j": Command.SELECT_NEXT,
    "down": Command.SELECT_NEXT,
    "k": Command.SELECT_PREVIOUS,
    "up": Command.SELECT_PREVIOUS,
    "tab": Command.NEXT_TAB,
    "l": Command.NEXT_TAB,
    "right": Command.NEXT_TAB,
    "enter": Command.ACTIVATE,
    "o": Command.ACTIVATE,
    "q": Command.QUIT,
    "escape": Command.QUIT,
}


class OpenError(Exception):
    """Raised when a link could not be handed to a browser."""


def open_in_browser(url: str) -> None:
    """Open ``url`` in the user's browser.

    Raises:
        OpenError: If no browser could be launched.
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        raise OpenError(f"could not open {url}: {exc}") from exc
    if not opened:
        raise OpenError(f"no browser available to open {url}")


def map_event_to_command(event: str) -> Command | None:
    """Translate a key name into a command; unrelated keys map to None."""
    return KEYMAP.get(event)


class InputSource(Protocol):
    async def next_event(self) -> str | None:
        """Wait for the next key name. None means the source is closed."""
        ...


class Renderer(Protocol):
    def render(self, view: DashboardView) -> None: ...

    def report(self, message: str) -> None: ...


class QueueInput:
    """Input source fed by a front end from its own key handlers.

    Events pushed while nobody is reading stay queued, so nothing pressed
    during a transition gets lost.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()

    def push(self, event: str) -> None:
        self._queue.put_nowait(event)

    def close(self) -> None:
        self._queue.put_nowait(None)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def next_event(self) -> str | None:
        return await self._queue.get()


class ScriptedInput:
    """Replays a fixed sequence of events, then reports the source closed."""

    def __init__(self, events: Iterable[str]) -> None:
        self._events = list(events)
        self.consumed = 0

    @property
    def remaining(self) -> list[str]:
        return self._events[self.consumed:]

    async def next_event(self) -> str | None:
        if self.consumed >= len(self._events):
            return None
        event = self._events[self.consumed]
        self.consumed += 1
        return event


class EventLoop:
    """Render / gate / read / dispatch until the dashboard quits."""

    def __init__(
        self,
        state: DashboardState,
        source: InputSource,
        renderer: Renderer,
        opener: Callable[[str], None] = open_in_browser,
        tick: float = DEFAULT_TICK,
        transition_duration: float = 0.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.state = state
        self.source = source
        self.renderer = renderer
        self._opener = opener
        self._tick = tick
        self._transition_duration = transition_duration
        self._sleep = sleep

    async def run(self) -> None:
        # Data is loaded by the time the loop starts: play the reveal effect
        self.state.gate.play(self._transition_duration)

        while self.state.running:
            self.renderer.render(self.state.view())

            if self.state.gate.is_playing():
                await self._sleep(self._tick)
                continue

            event = await self.source.next_event()
            if event is None:
                logger.debug("Input source closed, stopping")
                break

            command = map_event_to_command(event)
            if command is None:
                continue

            logger.debug(f"Key {event!r} -> {command.name}")
            action = self.state.dispatch(command)
            if action is not None:
                self._perform(action)

    def _perform(self, action: OpenUrl) -> None:
        try:
            self._opener(action.url)
        except OpenError as exc:
            logger.warning(f"Failed to open browser: {exc}")
            self.renderer.report(str(exc))
        else:
            logger.info(f"Opened {action.url}")
