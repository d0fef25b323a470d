"""Identifier minting for sessions, events and tickets."""

from __future__ import annotations

import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def random_suffix(length: int = 9) -> str:
    """Return ``length`` random base-36 characters."""

    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def mint_id(prefix: str, *, length: int = 9) -> str:
    """Build ``<prefix>_<epoch ms>_<random>`` (e.g. ``evt_1700000000000_k3j9x0a1b``)."""

    return f"{prefix}_{int(time.time() * 1000)}_{random_suffix(length)}"


def mint_session_id() -> str:
    """Mint a session id for callers that did not send one."""

    return mint_id("session")


def mint_ticket_id() -> str:
    """Support ticket reference, e.g. ``SUP-1700000000000-4KD9QZ``."""

    return f"SUP-{int(time.time() * 1000)}-{random_suffix(6).upper()}"
