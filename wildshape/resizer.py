from __future__ import annotations

import logging
from dataclasses import dataclass, field

from wildshape import __version__
from wildshape.chat import ChatChannel
from wildshape.events import CHAT_MESSAGE, TOKEN_CHANGED, DeferredScheduler, EventBus, Scheduler
from wildshape.models import ChatMessage, Token
from wildshape.reconcile import FixReport, process_command
from wildshape.resize import check_token_size
from wildshape.store import ObjectStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WildShapeResizer:
    """The resizer's handlers bound to their collaborators.

    Build one per process and hand it the host's event bus via `register_handlers`.
    """

    store: ObjectStore
    chat: ChatChannel
    scheduler: Scheduler = field(default_factory=DeferredScheduler)
    settle_delay_ms: int = 10
    version: str = __version__
    _registered_on: set[int] = field(default_factory=set, init=False, repr=False)

    def notify_start(self) -> None:
        logger.info(".oO WildShapeResizer %s Oo.", self.version)

    def register_handlers(self, bus: EventBus) -> bool:
        """Subscribe to token changes and chat. Returns False if already subscribed to `bus`."""

        if id(bus) in self._registered_on:
            return False
        bus.on(CHAT_MESSAGE, self.on_chat_message)
        bus.on(TOKEN_CHANGED, self.on_token_changed)
        self._registered_on.add(id(bus))
        return True

    def on_token_changed(self, token: Token) -> bool:
        return check_token_size(
            store=self.store,
            chat=self.chat,
            scheduler=self.scheduler,
            token=token,
            settle_delay_ms=self.settle_delay_ms,
        )

    def on_chat_message(self, msg: ChatMessage) -> list[FixReport]:
        return process_command(store=self.store, chat=self.chat, msg=msg)
