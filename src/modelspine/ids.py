"""
Identity values assigned by stores to records inserted without one.

An identity is a ULID: a 128-bit integer made of a 48-bit millisecond
timestamp followed by 80 random bits, written as 26 Crockford base32
characters. Identities minted later sort after earlier ones, so a store
ordering on its id property returns records in insertion time order.

Tags:
    ulid, identity, memory-store, modelspine
"""

import random
import time

_ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_DECODING = {char: index for index, char in enumerate(_ENCODING)}

_LENGTH = 26
_TIMESTAMP_LENGTH = 10
_RANDOM_BITS = 80


def generate_ulid(timestamp_ms: int | None = None) -> str:
    """New identity for a record, stamped with *timestamp_ms* (default: now)."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    if not 0 <= timestamp_ms < 1 << 48:
        raise ValueError(f"timestamp out of range: {timestamp_ms}")
    value = (timestamp_ms << _RANDOM_BITS) | random.getrandbits(_RANDOM_BITS)
    chars = []
    for _ in range(_LENGTH):
        value, index = divmod(value, 32)
        chars.append(_ENCODING[index])
    return "".join(reversed(chars))


def ulid_timestamp(ulid: str) -> int:
    """Millisecond timestamp an identity was minted with."""
    if len(ulid) != _LENGTH:
        raise ValueError(f"not a ULID: {ulid!r}")
    value = 0
    for char in ulid[:_TIMESTAMP_LENGTH].upper():
        if char not in _DECODING:
            raise ValueError(f"not a ULID: {ulid!r}")
        value = value * 32 + _DECODING[char]
    return value


__all__ = [
    "generate_ulid",
    "ulid_timestamp",
]
