from __future__ import annotations

import logging

import redis

from wildshape.chat import ChatChannel
from wildshape.events import Scheduler
from wildshape.models import PAGE_TYPE, Page, Token
from wildshape.sides import items_for_token
from wildshape.store import ObjectStore, ObjRef

logger = logging.getLogger(__name__)

BASE_GRID_SIZE = 70

MISMATCH_MESSAGE = (
    "<strong>ERROR:</strong> token image does not match table image."
    " This token likely needs to be recreated."
)


def grid_size_for(*, store: ObjectStore, token: Token) -> float:
    """Pixel size of one grid square on the token's page."""

    raw = store.get_obj(PAGE_TYPE, token.page_id) if token.page_id else None
    if raw is None:
        return BASE_GRID_SIZE
    return BASE_GRID_SIZE * Page.model_validate(raw).snapping_increment


def check_token_size(
    *,
    store: ObjectStore,
    chat: ChatChannel,
    scheduler: Scheduler,
    token: Token,
    settle_delay_ms: int = 10,
) -> bool:
    """Resize `token` to the weight of its current side. Returns True if it resized."""

    if not token.name:
        return False

    items = items_for_token(store=store, token=token)
    if not items:
        return False

    grid_size = grid_size_for(store=store, token=token)

    idx = token.current_side - 1
    side = items[idx] if 0 <= idx < len(items) else None
    if side is None or side.avatar != token.imgsrc:
        # Table sides are copied into the token when it is created; editing the
        # table afterwards leaves the token pointing at stale images.
        logger.error("WildShapeResizer ERROR: token image does not match table image (%s)", token.name)
        chat.send_direct(MISMATCH_MESSAGE)
        return False

    dimension = grid_size * side.weight
    return do_resize(
        store=store,
        scheduler=scheduler,
        token=token,
        dimension=dimension,
        settle_delay_ms=settle_delay_ms,
    )


def do_resize(
    *,
    store: ObjectStore,
    scheduler: Scheduler,
    token: Token,
    dimension: float,
    settle_delay_ms: int = 10,
) -> bool:
    if not token.width or not token.height:
        logger.info("WildShapeResizer: %s has no size yet, skipping.", token.name)
        return False

    if token.width == dimension and token.height == dimension:
        logger.info("WildShapeResizer: %s is already correctly sized.", token.name)
        return False

    logger.info("WildShapeResizer: resizing %s to %s", token.name, dimension)
    store.set(token.ref, "width", dimension)
    store.set(token.ref, "height", dimension)

    # The host re-centers on the old size; pin top/left now and once more after
    # it has processed the size change.
    _restore_position(store=store, ref=token.ref, top=token.top, left=token.left)
    scheduler.call_later(
        settle_delay_ms / 1000,
        lambda: _restore_position_later(store=store, ref=token.ref, top=token.top, left=token.left),
    )
    return True


def _restore_position(*, store: ObjectStore, ref: ObjRef, top: float, left: float) -> None:
    store.set(ref, "top", top)
    store.set(ref, "left", left)


def _restore_position_later(*, store: ObjectStore, ref: ObjRef, top: float, left: float) -> None:
    # Runs outside any handler, so nothing upstream would see a failure.
    try:
        _restore_position(store=store, ref=ref, top=top, left=left)
    except redis.RedisError:
        logger.exception("WildShapeResizer: could not restore position of %s", ref.id)
