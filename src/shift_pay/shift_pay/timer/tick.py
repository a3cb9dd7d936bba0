from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Protocol

from ..core.constants import DEFAULT_TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickScheduler(Protocol):
    """Recurring tick with an explicit start/cancel lifecycle."""

    @property
    def active(self) -> bool:
        raise NotImplementedError

    def start(self, callback: TickCallback) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError


class AsyncioTickScheduler(TickScheduler):
    """Fires ``callback`` every ``interval`` seconds on one event loop.

    Ticks run on the loop's thread, so a tick never interleaves with another
    callback scheduled on the same loop. ``start`` needs a running loop unless
    one is passed in.
    """

    def __init__(
        self,
        interval: float = DEFAULT_TICK_INTERVAL_SECONDS,
        *,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._interval = float(interval)
        self._loop = loop
        self._callback: Optional[TickCallback] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        if self._callback is not None:
            self._callback = callback
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._callback = callback
        self._arm()
        logger.debug("Tick scheduler started (interval=%ss)", self._interval)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._callback is not None:
            logger.debug("Tick scheduler cancelled")
        self._callback = None

    def _arm(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        self._handle = None
        callback = self._callback
        if callback is None:
            return
        try:
            callback()
        finally:
            # The callback may have cancelled us.
            if self._callback is not None and self._handle is None:
                self._arm()


class RequestTickScheduler(TickScheduler):
    """Tick source for request-driven hosts.

    The web layer calls ``run_pending`` before serving a request; the callback
    only runs while a shift is active.
    """

    def __init__(self):
        self._callback: Optional[TickCallback] = None

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def run_pending(self) -> bool:
        if self._callback is None:
            return False
        self._callback()
        return True
