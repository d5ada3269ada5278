from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

TOKEN_CHANGED = "change:token"
CHAT_MESSAGE = "chat:message"

Handler = Callable[..., None]


class EventBus:
    """In-process pub/sub keyed by host event name.

    Handlers run synchronously, in subscription order. A handler that raises is
    logged and the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def handlers(self, event: str) -> list[Handler]:
        return list(self._handlers.get(event, []))

    def emit(self, event: str, *args: Any) -> int:
        """Invoke every handler for `event`. Returns how many ran without raising."""

        ok = 0
        for handler in self.handlers(event):
            try:
                handler(*args)
            except Exception:
                logger.exception("handler %r failed for %s", handler, event)
                continue
            ok += 1
        return ok


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> None:  # pragma: no cover
        ...


class DeferredScheduler:
    """Fire-and-forget timers.

    Uses the running asyncio loop when there is one (inside the API), otherwise a
    daemon `threading.Timer`.
    """

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(delay_s, callback)
            timer.daemon = True
            timer.start()
            return
        loop.call_later(delay_s, callback)
