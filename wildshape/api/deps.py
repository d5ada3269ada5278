from __future__ import annotations

from fastapi import Request

from wildshape.chat import ChatChannel
from wildshape.events import EventBus
from wildshape.store import ObjectStore


def get_store(request: Request) -> ObjectStore:
    return request.app.state.resizer.store


def get_chat(request: Request) -> ChatChannel:
    return request.app.state.resizer.chat


def get_bus(request: Request) -> EventBus:
    return request.app.state.bus
