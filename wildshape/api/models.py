from __future__ import annotations

from pydantic import BaseModel, Field


class InfoResponse(BaseModel):
    name: str
    version: str


class EventAccepted(BaseModel):
    event: str
    # Handlers that ran to completion.
    handled: int


class ChatEntryOut(BaseModel):
    entry_id: str
    who: str
    type: str
    content: str


class ChatLogResponse(BaseModel):
    stream: str
    messages: list[ChatEntryOut] = Field(default_factory=list)
