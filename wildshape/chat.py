from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import cast

import redis

logger = logging.getLogger(__name__)

SENDER = "WildShapeResizer"


@dataclass(frozen=True, slots=True)
class ChatEntry:
    entry_id: str
    who: str
    type: str
    content: str


class ChatChannel:
    """Outbound chat, appended to a Redis stream the host relays to players."""

    def __init__(self, *, r: redis.Redis, prefix: str = "wildshape", who: str = SENDER) -> None:
        self._r = r
        self.key = f"{prefix}:chat"
        self.who = who

    def send_direct(self, content: str) -> str:
        """Send a `/direct` message: shown as-is, without a speaker line."""

        stream_id = self._r.xadd(self.key, {"who": self.who, "type": "direct", "content": content})
        logger.debug("chat %s: %s", stream_id, content)
        return cast(str, stream_id)

    def latest(self, *, count: int = 20) -> list[ChatEntry]:
        rows = self._r.xrevrange(self.key, count=count)
        # Oldest first.
        return [
            ChatEntry(
                entry_id=cast(str, entry_id),
                who=fields.get("who", ""),
                type=fields.get("type", ""),
                content=fields.get("content", ""),
            )
            for entry_id, fields in reversed(rows)
        ]
