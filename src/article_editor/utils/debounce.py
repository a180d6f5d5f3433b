# src/article_editor/utils/debounce.py
import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Coalesces bursts of calls into one callback after `delay` seconds of quiet.

    Every `trigger()` cancels the pending timer and starts a new one on the
    running asyncio loop. `cancel()` drops a pending call without running it;
    `flush()` runs it right away if one is pending.
    """

    def __init__(self, delay: float, callback: Callable[[], None],
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.delay = delay
        self._callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        if self._handle is not None:
            self.cancel()
            self._fire()

    def _fire(self) -> None:
        self._handle = None
        try:
            self._callback()
        except Exception as e:
            logger.error("Debounced callback failed: %s", e, exc_info=True)
