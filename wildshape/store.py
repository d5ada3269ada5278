from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import uuid4

import redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ObjRef:
    """Address of a host object: its type plus its opaque id."""

    type: str
    id: str


class ObjectStore(Protocol):
    """The slice of the host object graph the resizer talks to.

    Objects are plain attribute maps. Every map carries `_type` and `_id`.
    """

    def get_obj(self, type: str, id: str) -> dict[str, Any] | None:  # pragma: no cover
        ...

    def find_objs(self, type: str, **filters: Any) -> list[dict[str, Any]]:  # pragma: no cover
        ...

    def get(self, ref: ObjRef, field: str) -> Any:  # pragma: no cover
        ...

    def set(self, ref: ObjRef, field: str, value: Any) -> None:  # pragma: no cover
        ...


class RedisObjectStore:
    """Host object graph kept in Redis.

    Layout:
      - `{prefix}:obj:{type}:{id}` hash, one field per attribute, values JSON-encoded.
      - `{prefix}:objs:{type}` list of ids in insertion order.

    Insertion order is significant: it is the order table items are returned in,
    which is what ties a side index to a side.
    """

    def __init__(self, *, r: redis.Redis, prefix: str = "wildshape") -> None:
        self._r = r
        self._prefix = prefix

    def _obj_key(self, type: str, id: str) -> str:
        return f"{self._prefix}:obj:{type}:{id}"

    def _index_key(self, type: str) -> str:
        return f"{self._prefix}:objs:{type}"

    def create_obj(self, type: str, **attrs: Any) -> ObjRef:
        """Add an object to the graph.

        The resizer never creates objects; this exists so hosts and tests can seed them.
        """

        obj_id = str(attrs.pop("_id", None) or attrs.pop("id", None) or uuid4().hex)
        fields = {"_type": type, "_id": obj_id, **attrs}
        self._r.hset(self._obj_key(type, obj_id), mapping={k: json.dumps(v) for k, v in fields.items()})
        self._r.rpush(self._index_key(type), obj_id)
        return ObjRef(type=type, id=obj_id)

    def get_obj(self, type: str, id: str) -> dict[str, Any] | None:
        raw = self._r.hgetall(self._obj_key(type, id))
        if not raw:
            return None
        return {k: json.loads(v) for k, v in raw.items()}

    def find_objs(self, type: str, **filters: Any) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for obj_id in self._r.lrange(self._index_key(type), 0, -1):
            obj = self.get_obj(type, obj_id)
            if obj is None:
                # Index entry outlived its object.
                continue
            if all(obj.get(k) == v for k, v in filters.items()):
                out.append(obj)
        return out

    def get(self, ref: ObjRef, field: str) -> Any:
        raw = self._r.hget(self._obj_key(ref.type, ref.id), field)
        return None if raw is None else json.loads(raw)

    def set(self, ref: ObjRef, field: str, value: Any) -> None:
        logger.debug("set %s:%s %s=%r", ref.type, ref.id, field, value)
        self._r.hset(self._obj_key(ref.type, ref.id), field, json.dumps(value))
