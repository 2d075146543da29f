"""News API router: filtered listing, detail and the live list session."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, WebSocket, WebSocketDisconnect, status
from loguru import logger
from pydantic import ValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from news_admin.auth import AdminSession, decode_access_token, require_admin
from news_admin.config import Settings, get_settings
from news_admin.database import get_session
from news_admin.models import NewsItemRead
from news_admin.services.controller import NewsListController, Runner, ViewState, session_runner
from news_admin.services.filters import MAX_SQL_INT, FilterState
from news_admin.services.news_query import execute_news_query, get_news_item

router = APIRouter(prefix="/news", tags=["news"])


def get_live_runner() -> Runner:
    """Dependency providing the query runner for live sessions."""
    return session_runner()


@router.get("", response_model=dict)
async def list_news(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    _: AdminSession = Depends(require_admin),
    page: int = Query(1, ge=1),
    per_page: int | None = Query(None, ge=1),
    search: str | None = None,
    category: str | None = None,
    source_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    min_score: str | None = None,
    order_by: str | None = None,
    order_dir: str | None = None,
):
    """List news with filtering, sorting and pagination."""
    page_size = min(per_page or settings.default_page_size, settings.max_page_size)
    state = FilterState.from_params(
        search_text=search,
        category=category,
        source_id=source_id,
        start_date=start_date,
        end_date=end_date,
        min_score=min_score,
        page=page,
        page_size=page_size,
        sort_field=order_by,
        sort_direction=order_dir,
    )

    result = await execute_news_query(session, state)

    return {
        **result.model_dump(mode="json"),
        "filters": state.model_dump(mode="json"),
        "has_active_filters": state.has_active_filters(),
    }


@router.get("/{news_id}", response_model=NewsItemRead)
async def get_news(
    news_id: int = Path(..., ge=1, le=MAX_SQL_INT),
    session: AsyncSession = Depends(get_session),
    _: AdminSession = Depends(require_admin),
):
    """Get a single news item by ID."""
    item = await get_news_item(session, news_id)
    if item is None:
        raise HTTPException(status_code=404, detail="News item not found")
    return item


@router.websocket("/live")
async def live_news(
    websocket: WebSocket,
    token: str | None = Query(None),
    settings: Settings = Depends(get_settings),
    runner: Runner = Depends(get_live_runner),
):
    """
    Live news list session.

    The client sends filter interactions as JSON messages and receives the
    view state after every applied change:

    - {"action": "search", "value": "text"}  (debounced)
    - {"action": "update", "field": "category", "value": "conflicts"}
    - {"action": "toggle_sort", "field": "priority_score"}
    - {"action": "page", "value": 2}
    - {"action": "reset"}
    - {"action": "refresh"}
    """
    if settings.enable_auth:
        try:
            admin = decode_access_token(token or "", settings)
        except HTTPException:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
    else:
        admin = AdminSession(username="dev-user")

    await websocket.accept()
    logger.info(f"[LIVE] Session opened for '{admin.username}'")

    async def push(view: ViewState) -> None:
        await websocket.send_json({"type": "view", "data": view.model_dump(mode="json")})

    controller = NewsListController(
        runner,
        page_size=settings.default_page_size,
        debounce_ms=settings.search_debounce_ms,
        on_change=push,
    )
    try:
        controller.refresh()
        while True:
            try:
                # JSONDecodeError is a ValueError
                message = await websocket.receive_json()
                _dispatch(controller, message)
            except (KeyError, TypeError, ValueError, ValidationError) as e:
                await websocket.send_json({"type": "error", "detail": f"Invalid message: {e}"})
    except WebSocketDisconnect:
        logger.info(f"[LIVE] Session closed for '{admin.username}'")
    finally:
        controller.close()


def _dispatch(controller: NewsListController, message: Any) -> None:
    if not isinstance(message, dict):
        raise TypeError("expected a JSON object")
    action = message["action"]
    if action == "search":
        controller.set_search(str(message.get("value") or ""))
    elif action == "update":
        controller.update(message["field"], message.get("value"))
    elif action == "toggle_sort":
        controller.toggle_sort(message["field"])
    elif action == "page":
        controller.go_to_page(message["value"])
    elif action == "reset":
        controller.reset()
    elif action == "refresh":
        controller.refresh()
    else:
        raise ValueError(f"unknown action '{action}'")
