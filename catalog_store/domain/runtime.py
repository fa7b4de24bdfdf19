"""
Runtime codec: movie runtimes travel as the string "<minutes> mins".

Plain functions over an int. `format_runtime`/`parse_runtime` work on the bare
text, `encode_runtime`/`decode_runtime` on its quoted JSON form.
"""

from __future__ import annotations

import json
import re

from catalog_store.errors import InvalidFormat

UNIT = "mins"

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_DECIMAL = re.compile(r"[+-]?[0-9]+")


def format_runtime(minutes: int) -> str:
    return f"{minutes} {UNIT}"


def encode_runtime(minutes: int) -> str:
    """Encode a minute count as the quoted JSON string, e.g. '"90 mins"'."""
    return json.dumps(format_runtime(minutes))


def parse_runtime(text: str) -> int:
    """
    Parse the unquoted form "<n> mins" into an int.

    The text must split on a single space into exactly two tokens, the second
    being the literal unit and the first a base-10 signed 32-bit integer.
    Raises InvalidFormat otherwise.
    """
    if not isinstance(text, str):
        raise InvalidFormat()
    parts = text.split(" ")
    if len(parts) != 2 or parts[1] != UNIT:
        raise InvalidFormat()
    if not _DECIMAL.fullmatch(parts[0]):
        raise InvalidFormat()
    value = int(parts[0], 10)
    if not INT32_MIN <= value <= INT32_MAX:
        raise InvalidFormat()
    return value


def decode_runtime(raw: str | bytes) -> int:
    """Decode the quoted JSON form, e.g. '"90 mins"' -> 90."""
    try:
        text = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidFormat() from exc
    if not isinstance(text, str):
        raise InvalidFormat()
    return parse_runtime(text)


__all__ = [
    "UNIT",
    "format_runtime",
    "encode_runtime",
    "parse_runtime",
    "decode_runtime",
]
