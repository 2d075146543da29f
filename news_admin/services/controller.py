"""
News list session controller.

Owns one ``FilterState`` for the lifetime of a view session, debounces the
search box, runs queries, and publishes a ``ViewState`` (loading / error /
result). Every query gets an increasing request id and only the outcome of
the latest issued request is applied, so a slow older response can never
overwrite a newer one.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger
from pydantic import BaseModel, computed_field
from sqlalchemy.ext.asyncio import AsyncEngine

from news_admin.database import async_session_maker
from news_admin.errors import NewsAdminError
from news_admin.services.debounce import DEFAULT_DELAY_MS, Debouncer
from news_admin.services.filters import DEFAULT_PAGE_SIZE, FilterState, SortField
from news_admin.services.news_query import QueryResult, execute_news_query

Runner = Callable[[FilterState], Awaitable[QueryResult]]
ChangeCallback = Callable[["ViewState"], Any]


class ViewState(BaseModel):
    """What a news list view renders."""

    filters: FilterState
    loading: bool = False
    error: str | None = None
    result: QueryResult | None = None
    request_id: int = 0

    @computed_field
    @property
    def has_active_filters(self) -> bool:
        return self.filters.has_active_filters()


def session_runner(engine: AsyncEngine | None = None) -> Runner:
    """Runner that executes each query in its own database session."""

    async def run(state: FilterState) -> QueryResult:
        async with async_session_maker(engine) as session:
            return await execute_news_query(session, state)

    return run


class NewsListController:
    """
    Filter state plus query lifecycle for one news list session.

    All methods must be called from the running event loop. Methods that
    change the filters return the refresh task they started.

    Args:
        runner: Async callable executing a ``FilterState``
        page_size: Initial page size
        debounce_ms: Quiet period for search input
        on_change: Called with the new ``ViewState`` after every applied change,
            may be a coroutine function
    """

    def __init__(
        self,
        runner: Runner,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_ms: int = DEFAULT_DELAY_MS,
        on_change: ChangeCallback | None = None,
    ):
        self._runner = runner
        self._on_change = on_change
        self.state = FilterState(page_size=page_size)
        self.view = ViewState(filters=self.state)
        self._search = Debouncer(self._apply_search, debounce_ms)
        self._issued = 0
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def issued_requests(self) -> int:
        return self._issued

    @property
    def search_pending(self) -> bool:
        return self._search.pending

    # === User interactions ===

    def set_search(self, text: str) -> None:
        """Record search input; the query runs once typing has paused."""
        self._ensure_open()
        self._search(text)

    def update(self, field: str, value: Any) -> asyncio.Task:
        self._ensure_open()
        return self._apply(self.state.update(field, value))

    def go_to_page(self, page: int) -> asyncio.Task:
        return self.update("page", page)

    def toggle_sort(self, field: SortField | str) -> asyncio.Task:
        self._ensure_open()
        return self._apply(self.state.toggle_sort(field))

    def reset(self) -> asyncio.Task:
        self._ensure_open()
        self._search.cancel()
        return self._apply(self.state.reset())

    def refresh(self) -> asyncio.Task:
        """Re-run the current filters. Used for the manual refresh action."""
        self._ensure_open()
        self._issued += 1
        task = asyncio.get_running_loop().create_task(self._run(self._issued, self.state))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    async def wait_idle(self) -> None:
        """Wait until every started refresh has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Cancel pending search input and in-flight queries."""
        if self._closed:
            return
        self._closed = True
        self._search.close()
        for task in list(self._tasks):
            task.cancel()
        logger.debug(f"[LIVE] Controller closed after {self._issued} requests")

    # === Internals ===

    def _apply_search(self, text: str) -> None:
        if self._closed:
            return
        self._apply(self.state.update("search_text", text))

    def _apply(self, state: FilterState) -> asyncio.Task:
        self.state = state
        return self.refresh()

    async def _run(self, request_id: int, state: FilterState) -> ViewState:
        if request_id == self._issued:
            await self._publish(loading=True, error=None, request_id=request_id, filters=state)

        try:
            result = await self._runner(state)
        except NewsAdminError as e:
            if request_id != self._issued:
                logger.debug(f"[LIVE] Discarding stale error from request {request_id}")
                return self.view
            logger.warning(f"[LIVE] Request {request_id} failed: {e}")
            await self._publish(loading=False, error=str(e))
            return self.view
        except Exception as e:
            if request_id == self._issued:
                logger.error(f"[LIVE] Request {request_id} failed unexpectedly: {e!r}")
                await self._publish(loading=False, error=f"Unexpected error: {type(e).__name__}")
            raise

        if request_id != self._issued:
            logger.debug(f"[LIVE] Discarding stale result from request {request_id} (latest {self._issued})")
            return self.view

        await self._publish(loading=False, error=None, result=result)
        return self.view

    async def _publish(self, **changes: Any) -> None:
        self.view = self.view.model_copy(update=changes)
        if self._on_change is None:
            return
        outcome = self._on_change(self.view)
        if inspect.isawaitable(outcome):
            await outcome

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("[LIVE] Refresh failed unexpectedly")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("NewsListController is closed")
