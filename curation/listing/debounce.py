from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, TypeVar

from .config import DEFAULT_LISTING_CONFIG

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Debouncer:
    """Runs ``callback`` once a quiet period of ``delay`` seconds follows the last trigger.

    Each trigger cancels the scheduled-but-not-fired run. A run that already
    started keeps going; its result has to be checked for staleness by the
    caller (see ``RequestTokens``).
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay: float = DEFAULT_LISTING_CONFIG.debounce_seconds,
    ) -> None:
        self._callback = callback
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def scheduled(self) -> bool:
        return self._handle is not None

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple) -> None:
        self._handle = None
        result = self._callback(*args)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait for runs that already fired; scheduled ones are left alone."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class RequestTokens:
    """Monotonically increasing request tokens; only the latest one may apply."""

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest


class LiveQuery(Generic[R]):
    """Keystroke-driven re-query: debounced fetch, stale responses discarded."""

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[R]],
        on_result: Callable[[R], None],
        on_error: Callable[[Exception], None] | None = None,
        delay: float = DEFAULT_LISTING_CONFIG.debounce_seconds,
    ) -> None:
        self._fetch = fetch
        self._on_result = on_result
        self._on_error = on_error
        self._tokens = RequestTokens()
        self._debouncer = Debouncer(self._run, delay)
        self.discarded = 0

    def update(self, text: str) -> None:
        self._debouncer.trigger(text)

    async def wait_idle(self) -> None:
        await self._debouncer.wait_idle()

    async def _run(self, text: str) -> None:
        token = self._tokens.issue()
        try:
            result = await self._fetch(text)
        except Exception as exc:
            if not self._tokens.is_current(token):
                self.discarded += 1
                return
            if self._on_error is None:
                logger.warning("Live query for %r failed", text, exc_info=True)
            else:
                self._on_error(exc)
            return

        if not self._tokens.is_current(token):
            self.discarded += 1
            logger.debug("Discarding stale response for %r (token %d)", text, token)
            return
        self._on_result(result)
