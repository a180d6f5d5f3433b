# src/mutflex_shell/core/loop_runner.py
from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Coroutine, Optional

_MAIN_LOOP: Optional[asyncio.AbstractEventLoop] = None
_THREAD: Optional[threading.Thread] = None


def ensure_background_loop() -> asyncio.AbstractEventLoop:
    """
    Ensures a persistent asyncio event loop is running on a background thread.
    Uploads and the visual-edit debounce timers live on this loop.
    """
    global _MAIN_LOOP, _THREAD
    if _MAIN_LOOP is not None:
        return _MAIN_LOOP

    loop = asyncio.new_event_loop()

    def _run_loop(loop_: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop_)
        loop_.run_forever()

    t = threading.Thread(target=_run_loop, args=(loop,), daemon=True)
    t.start()

    _MAIN_LOOP = loop
    _THREAD = t
    return loop


def run_on_main_loop(coro: Coroutine[Any, Any, Any], timeout: float | None = None) -> Any:
    """
    Executes a coroutine on the persistent background loop and waits for the result.
    Falls back to asyncio.run() if no background loop exists (e.g. in tests).
    """
    if _MAIN_LOOP is not None:
        fut = asyncio.run_coroutine_threadsafe(coro, _MAIN_LOOP)
        return fut.result(timeout)
    return asyncio.run(coro)


def call_on_main_loop(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Runs a plain callable on the background loop thread and returns its result.
    Editor state shared with debounce timers is only touched from that thread.
    Already on that loop, the call happens in place.
    """
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is not None and (_MAIN_LOOP is None or running is _MAIN_LOOP):
        return func(*args, **kwargs)

    async def _call() -> Any:
        return func(*args, **kwargs)

    return run_on_main_loop(_call())
