"""
Trailing-edge debounce on the asyncio event loop.

Used to keep keystroke-level input (the news search box) from triggering a
query per keystroke. Every pending invocation is an explicit
``asyncio.TimerHandle`` that is cancelled when superseded or when the owner
closes the debouncer.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_DELAY_MS = 300


class Debouncer:
    """
    Wrap a callback so that bursts of calls collapse into one trailing call.

    Each call cancels the pending timer and schedules ``callback`` with the
    latest arguments ``delay_ms`` milliseconds later. If the callback returns
    an awaitable it is run as a task that the debouncer keeps track of, so
    ``close()`` can cancel it too.

    Usage:
        debounced = Debouncer(run_search, delay_ms=300)
        debounced("e"); debounced("el"); debounced("election")
        # run_search("election") runs once, 300ms after the last call
        debounced.close()
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay_ms: int = DEFAULT_DELAY_MS,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self.callback = callback
        self.delay_ms = delay_ms
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._pending_args: tuple[tuple, dict] | None = None
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def delay(self) -> float:
        """Delay in seconds."""
        return self.delay_ms / 1000

    @property
    def pending(self) -> bool:
        """True while an invocation is scheduled and has not fired yet."""
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        if self._closed:
            raise RuntimeError("Debouncer is closed")
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._pending_args = (args, kwargs)
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> bool:
        """Drop the pending invocation. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        self._pending_args = None
        return True

    def flush(self) -> None:
        """Fire the pending invocation now instead of waiting for the timer."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def close(self) -> None:
        """Cancel the pending timer and any running callback task."""
        if self._closed:
            return
        self._closed = True
        self.cancel()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def __enter__(self) -> "Debouncer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _fire(self) -> None:
        self._handle = None
        if self._pending_args is None:
            return
        args, kwargs = self._pending_args
        self._pending_args = None

        try:
            result = self.callback(*args, **kwargs)
        except Exception:
            logger.exception("[DEBOUNCE] Callback raised")
            return

        if inspect.isawaitable(result):
            loop = self._loop or asyncio.get_running_loop()
            task = loop.create_task(_await(result))
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("[DEBOUNCE] Callback task failed")


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class DebouncedValue(Generic[T]):
    """
    A value that only settles after its input has been stable for ``delay_ms``.

    ``set()`` records the raw input; ``value`` keeps returning the previous
    settled value until the quiet period elapses. Subscribers are called with
    every settled value.
    """

    def __init__(self, initial: T, delay_ms: int = DEFAULT_DELAY_MS):
        self._value = initial
        self._raw = initial
        self._subscribers: list[Callable[[T], Any]] = []
        self._debouncer = Debouncer(self._settle, delay_ms)

    @property
    def value(self) -> T:
        """The last settled value."""
        return self._value

    @property
    def raw(self) -> T:
        """The latest input, settled or not."""
        return self._raw

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def set(self, value: T) -> None:
        self._raw = value
        self._debouncer(value)

    def subscribe(self, callback: Callable[[T], Any]) -> Callable[[], None]:
        """Register a callback for settled values. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def close(self) -> None:
        self._debouncer.close()
        self._subscribers.clear()

    def _settle(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            callback(value)
