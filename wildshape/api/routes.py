from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from wildshape import __version__
from wildshape.api.deps import get_bus, get_chat, get_store
from wildshape.api.models import ChatEntryOut, ChatLogResponse, EventAccepted, InfoResponse
from wildshape.chat import ChatChannel
from wildshape.events import CHAT_MESSAGE, TOKEN_CHANGED, EventBus
from wildshape.models import TOKEN_TYPE, ChatMessage, Token
from wildshape.store import ObjectStore

router = APIRouter()


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/info", response_model=InfoResponse)
async def info() -> InfoResponse:
    return InfoResponse(name="WildShapeResizer", version=__version__)


@router.post("/events/token/{token_id}/changed", response_model=EventAccepted)
async def token_changed_route(
    token_id: str,
    store: ObjectStore = Depends(get_store),
    bus: EventBus = Depends(get_bus),
) -> EventAccepted:
    raw = store.get_obj(TOKEN_TYPE, token_id)
    if raw is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Token not found")

    try:
        token = Token.model_validate(raw)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Malformed token: {e}") from e

    handled = bus.emit(TOKEN_CHANGED, token)
    return EventAccepted(event=TOKEN_CHANGED, handled=handled)


@router.post("/events/chat", response_model=EventAccepted)
async def chat_message_route(payload: ChatMessage, bus: EventBus = Depends(get_bus)) -> EventAccepted:
    handled = bus.emit(CHAT_MESSAGE, payload)
    return EventAccepted(event=CHAT_MESSAGE, handled=handled)


@router.get("/chat", response_model=ChatLogResponse)
async def chat_log_route(
    count: int = Query(default=20, ge=1, le=500),
    chat: ChatChannel = Depends(get_chat),
) -> ChatLogResponse:
    entries = chat.latest(count=count)
    return ChatLogResponse(
        stream=chat.key,
        messages=[ChatEntryOut(entry_id=e.entry_id, who=e.who, type=e.type, content=e.content) for e in entries],
    )
