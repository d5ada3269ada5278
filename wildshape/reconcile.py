from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError
from statemachine import State, StateMachine

from wildshape.chat import ChatChannel
from wildshape.encoding import decode_sides, encode_sides
from wildshape.models import TOKEN_TYPE, ChatMessage, Token
from wildshape.sides import items_for_token
from wildshape.store import ObjectStore

logger = logging.getLogger(__name__)

FIX_COMMAND = "!wildFix"


class SideScan(StateMachine):
    """Per-token outcome of looking for the token's image among the table's sides."""

    unscanned = State("Unscanned", initial=True)
    matched = State("Matched", final=True)
    missing = State("Missing", final=True)

    side_found = unscanned.to(matched)
    side_lost = unscanned.to(missing)


@dataclass(slots=True)
class FixReport:
    token_name: str
    added: list[str] = field(default_factory=list)
    removed: int = 0
    was_reset: bool = False

    @property
    def nothing_to_do(self) -> bool:
        return not self.was_reset and not self.added and not self.removed

    def message(self) -> str:
        if self.nothing_to_do:
            return "<em>Nothing to do!</em>"

        lines: list[str] = []
        if self.added:
            lines.append(f"<strong>Added:</strong> {', '.join(self.added)}")
        if self.removed:
            lines.append(f"<strong>Removed:</strong> {self.removed} items")
        if self.was_reset:
            lines.append("<em>Existing token was missing, reset to #1</em>")
        return "\n".join(lines)


def fix_token(*, store: ObjectStore, chat: ChatChannel, token: Token) -> FixReport | None:
    """Rebuild a token's `sides` from its table and repair `currentSide`.

    Returns None (and writes nothing) when the token has no table or the table is empty.
    """

    items = items_for_token(store=store, token=token)
    if not items:
        logger.debug("WildShapeResizer: no sides for %s", token.name or token.id)
        return None

    logger.info("SIDES BEFORE: %s", token.sides)
    known = decode_sides(token.sides)

    report = FixReport(token_name=token.name)
    found: int | None = None
    for i, item in enumerate(items):
        if item.avatar in known:
            logger.debug("FOUND: %s", item.name)
            known.discard(item.avatar)
        else:
            logger.debug("NOT FOUND: %s", item.name)
            report.added.append(item.name)

        if found is None and item.avatar == token.imgsrc:
            found = i
    report.removed = len(known)

    sides = encode_sides([item.avatar for item in items])
    store.set(token.ref, "sides", sides)
    logger.info("SIDES AFTER: %s", sides)

    scan = SideScan()
    if found is None:
        scan.side_lost()
        logger.info("WildShapeResizer: current side of %s missing, resetting", token.name)
        store.set(token.ref, "imgsrc", items[0].avatar)
        found = 0
    else:
        scan.side_found()
    report.was_reset = scan.current_state.id == SideScan.missing.id

    store.set(token.ref, "currentSide", found + 1)

    chat.send_direct(report.message())
    return report


def selected_tokens(*, store: ObjectStore, msg: ChatMessage) -> list[Token]:
    tokens: list[Token] = []
    for sel in msg.selected:
        raw = store.get_obj(sel.type, sel.id)
        if raw is None:
            logger.error("WildShapeResizer ERROR: selected item %s no longer exists.", sel.id)
            continue
        if raw.get("_type") != TOKEN_TYPE:
            name = raw.get("name") or sel.id
            logger.error("WildShapeResizer ERROR: selected item %s is not a token.", name)
            continue
        try:
            token = Token.model_validate(raw)
        except ValidationError as e:
            logger.error("WildShapeResizer ERROR: selected token %s is malformed: %s", raw.get("name") or sel.id, e)
            continue
        tokens.append(token)
    return tokens


def process_command(*, store: ObjectStore, chat: ChatChannel, msg: ChatMessage) -> list[FixReport]:
    """Handle `!wildFix` over the sender's selection. Other messages are ignored."""

    if msg.type != "api" or msg.content != FIX_COMMAND:
        return []

    reports: list[FixReport] = []
    for token in selected_tokens(store=store, msg=msg):
        try:
            report = fix_token(store=store, chat=chat, token=token)
        except Exception:
            logger.exception("WildShapeResizer: fixing %s failed", token.name or token.id)
            continue
        if report is not None:
            reports.append(report)
    return reports
