from __future__ import annotations

import logging

import redis
from fastapi import FastAPI

from wildshape import __version__
from wildshape.api.routes import router
from wildshape.chat import ChatChannel
from wildshape.config import settings_from_env
from wildshape.events import DeferredScheduler, EventBus, Scheduler
from wildshape.resizer import WildShapeResizer
from wildshape.store import RedisObjectStore

settings = settings_from_env()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def redis_from_settings() -> redis.Redis:
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)


def create_app(*, r: redis.Redis | None = None, scheduler: Scheduler | None = None) -> FastAPI:
    """Build the host adapter.

    `r` and `scheduler` are injectable so tests can run against fakeredis and
    capture deferred work; by default they come from the environment.
    """

    app = FastAPI(title="wildshape-resizer", version=__version__)
    app.include_router(router)

    @app.on_event("startup")
    async def _startup() -> None:
        client = r if r is not None else redis_from_settings()
        resizer = WildShapeResizer(
            store=RedisObjectStore(r=client, prefix=settings.key_prefix),
            chat=ChatChannel(r=client, prefix=settings.key_prefix),
            scheduler=scheduler or DeferredScheduler(),
            settle_delay_ms=settings.resize_settle_delay_ms,
        )
        bus = EventBus()

        app.state.redis = client
        app.state.resizer = resizer
        app.state.bus = bus

        resizer.notify_start()
        resizer.register_handlers(bus)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        # Only close clients we opened.
        if r is None:
            app.state.redis.close()

    return app


app = create_app()
