from __future__ import annotations

from wildshape.models import TABLE_ITEM_TYPE, TABLE_TYPE, RollableTable, TableItem, Token
from wildshape.store import ObjectStore


def table_for_token(*, store: ObjectStore, token: Token) -> RollableTable | None:
    if not token.name:
        return None
    found = store.find_objs(TABLE_TYPE, name=token.name)
    if not found:
        return None
    return RollableTable.model_validate(found[0])


def items_for_token(*, store: ObjectStore, token: Token) -> list[TableItem] | None:
    """Sides of the rollable table named like the token, in table order.

    None when the token is unnamed or no table carries its name.
    """

    table = table_for_token(store=store, token=token)
    if table is None:
        return None
    return [TableItem.model_validate(o) for o in store.find_objs(TABLE_ITEM_TYPE, _rollabletableid=table.id)]
