"""Deterministic hashing helpers for variant bucketing and safe log keys.

``string_hash32`` reproduces the 31-multiplier rolling hash used by the
marketing site's browser/edge code, including 32-bit signed wraparound after
every step, so bucket assignments stay identical across deployments.
"""

from __future__ import annotations

import hashlib

BUCKET_COUNT = 100

_UINT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    """Wrap an arbitrary int into the signed 32-bit range."""

    value &= _UINT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def utf16_code_units(text: str) -> list[int]:
    """Return the UTF-16 code units of ``text``.

    Characters outside the BMP become two surrogate units, matching how
    JavaScript strings index characters.

    Examples:
        >>> utf16_code_units("ab")
        [97, 98]
        >>> utf16_code_units("\\U0001F600")
        [55357, 56832]
    """

    raw = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(raw[i : i + 2], "little") for i in range(0, len(raw), 2)]


def string_hash32(text: str) -> int:
    """Compute the signed 32-bit polynomial hash ``h = h * 31 + unit``.

    Args:
        text: Input string; iterated as UTF-16 code units.

    Returns:
        int: Hash in ``[-2**31, 2**31 - 1]``.

    Examples:
        >>> string_hash32("")
        0
        >>> string_hash32("a")
        97
        >>> string_hash32("ab")
        3105
    """

    value = 0
    for unit in utf16_code_units(text):
        value = _to_int32(value * 31 + unit)
    return value


def bucket_for(key: str) -> int:
    """Map a bucketing key to an integer bucket in ``[0, 100)``."""

    return abs(string_hash32(key)) % BUCKET_COUNT


def hash_identifier(value: str) -> str:
    """Hash an identifier (IP, session id) for logging without exposing it."""

    return hashlib.sha256(value.encode()).hexdigest()[:16]
