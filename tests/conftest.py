from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import fakeredis
import pytest

from wildshape.chat import ChatChannel
from wildshape.models import PAGE_TYPE, TABLE_ITEM_TYPE, TABLE_TYPE, TOKEN_TYPE, Token
from wildshape.resizer import WildShapeResizer
from wildshape.store import ObjRef, RedisObjectStore


@dataclass(slots=True)
class RecordingScheduler:
    """Captures deferred callbacks so tests decide when (and whether) they run."""

    calls: list[tuple[float, Callable[[], None]]] = field(default_factory=list)

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> None:
        self.calls.append((delay_s, callback))

    def run_all(self) -> None:
        pending, self.calls = self.calls, []
        for _, cb in pending:
            cb()


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def store(r: fakeredis.FakeRedis) -> RedisObjectStore:
    return RedisObjectStore(r=r)


@pytest.fixture()
def chat(r: fakeredis.FakeRedis) -> ChatChannel:
    return ChatChannel(r=r)


@pytest.fixture()
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture()
def resizer(store: RedisObjectStore, chat: ChatChannel, scheduler: RecordingScheduler) -> WildShapeResizer:
    return WildShapeResizer(store=store, chat=chat, scheduler=scheduler)


@pytest.fixture()
def make_table(store: RedisObjectStore) -> Callable[..., list[ObjRef]]:
    """Create a rollable table; `sides` is a list of (item name, avatar, weight)."""

    def _make(name: str, sides: list[tuple[str, str, float]]) -> list[ObjRef]:
        table = store.create_obj(TABLE_TYPE, name=name)
        return [
            store.create_obj(TABLE_ITEM_TYPE, _rollabletableid=table.id, name=n, avatar=a, weight=w)
            for n, a, w in sides
        ]

    return _make


@pytest.fixture()
def make_page(store: RedisObjectStore) -> Callable[[float], str]:
    def _make(snapping_increment: float) -> str:
        return store.create_obj(PAGE_TYPE, snapping_increment=snapping_increment).id

    return _make


@pytest.fixture()
def reload(store: RedisObjectStore) -> Callable[[str], Token]:
    """Fresh typed view of a token, after handlers have written to it."""

    def _load(token_id: str) -> Token:
        raw = store.get_obj(TOKEN_TYPE, token_id)
        assert raw is not None
        return Token.model_validate(raw)

    return _load


@pytest.fixture()
def make_token(store: RedisObjectStore, reload: Callable[[str], Token]) -> Callable[..., Token]:
    def _make(**attrs: object) -> Token:
        defaults: dict[str, object] = {"width": 70, "height": 70, "top": 105, "left": 245}
        ref = store.create_obj(TOKEN_TYPE, **{**defaults, **attrs})
        return reload(ref.id)

    return _make
