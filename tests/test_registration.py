from __future__ import annotations

import asyncio
import logging
import threading

from wildshape import __version__
from wildshape.config import settings_from_env
from wildshape.events import CHAT_MESSAGE, TOKEN_CHANGED, DeferredScheduler, EventBus


def test_notify_start_logs_banner(resizer, caplog) -> None:
    with caplog.at_level(logging.INFO):
        resizer.notify_start()

    assert f".oO WildShapeResizer {__version__} Oo." in caplog.text


def test_handlers_register_once_per_bus(resizer) -> None:
    bus = EventBus()

    assert resizer.register_handlers(bus) is True
    assert resizer.register_handlers(bus) is False

    assert bus.handlers(CHAT_MESSAGE) == [resizer.on_chat_message]
    assert bus.handlers(TOKEN_CHANGED) == [resizer.on_token_changed]


def test_bus_keeps_going_after_a_failing_handler(caplog) -> None:
    bus = EventBus()
    seen: list[str] = []

    def boom(value: str) -> None:
        raise RuntimeError("nope")

    bus.on("change:token", boom)
    bus.on("change:token", seen.append)

    with caplog.at_level(logging.ERROR):
        assert bus.emit("change:token", "tok") == 1

    assert seen == ["tok"]
    assert "failed for change:token" in caplog.text


def test_emit_without_handlers_is_harmless() -> None:
    assert EventBus().emit("chat:message", object()) == 0


def test_token_change_reaches_resizer_through_bus(resizer, make_table, make_token, reload) -> None:
    bus = EventBus()
    resizer.register_handlers(bus)
    make_table("Druid", [("Wolf", "img/wolf.png", 1), ("Bear", "img/bear.png", 2)])
    token = make_token(name="Druid", imgsrc="img/bear.png", currentSide=2)

    bus.emit(TOKEN_CHANGED, token)

    assert reload(token.id).width == 140


def test_deferred_scheduler_runs_without_a_loop() -> None:
    done = threading.Event()

    DeferredScheduler().call_later(0.001, done.set)

    assert done.wait(timeout=2)


def test_settings_come_from_env(monkeypatch) -> None:
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/3")
    monkeypatch.setenv("WILDSHAPE_RESIZE_DELAY_MS", "25")
    monkeypatch.setenv("WILDSHAPE_LOG_LEVEL", "debug")
    monkeypatch.delenv("WILDSHAPE_KEY_PREFIX", raising=False)

    s = settings_from_env()

    assert s.redis_url == "redis://cache:6379/3"
    assert s.resize_settle_delay_ms == 25
    assert s.log_level == "DEBUG"
    assert s.key_prefix == "wildshape"


def test_deferred_scheduler_uses_the_running_loop() -> None:
    fired: list[str] = []

    async def _main() -> None:
        loop = asyncio.get_running_loop()
        done = loop.create_future()

        def _cb() -> None:
            fired.append(threading.current_thread().name)
            done.set_result(None)

        DeferredScheduler().call_later(0.001, _cb)
        await asyncio.wait_for(done, timeout=2)

    asyncio.run(_main())

    assert fired == [threading.main_thread().name]
