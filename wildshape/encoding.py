"""Encoding for the `|`-delimited `sides` attribute on tokens."""

from __future__ import annotations

from urllib.parse import quote, unquote

# Characters encodeURIComponent leaves alone on top of quote()'s always-safe set.
_URI_COMPONENT_SAFE = "!~*'()"


def encode_side(side: str) -> str:
    # Image urls round-trip through the host with this substitution in place.
    return quote(side, safe=_URI_COMPONENT_SAFE).replace("%3F", "/", 1)


def decode_side(side: str) -> str:
    return unquote(side)


def encode_sides(avatars: list[str]) -> str:
    return "|".join(encode_side(a) for a in avatars)


def decode_sides(raw: str | None) -> set[str]:
    if not raw:
        return set()
    return {decode_side(s) for s in raw.split("|")}
