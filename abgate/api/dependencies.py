"""Request-scoped accessors for application-owned services."""

from __future__ import annotations

from typing import Any

from fastapi import Request

from abgate.core.rate_limit import client_key_from_request
from abgate.services.result_tracker import ResultTracker
from abgate.services.variant_service import VariantAssignor
from abgate.utils.ids import mint_session_id

SESSION_HEADER = "x-session-id"
SESSION_COOKIE = "session_id"


def get_variant_assignor(request: Request) -> VariantAssignor:
    return request.app.state.variant_assignor


def get_result_tracker(request: Request) -> ResultTracker:
    return request.app.state.result_tracker


def session_id_from_request(request: Request) -> tuple[str, bool]:
    """Return the caller's session id and whether it was freshly minted.

    Looks at the ``X-Session-ID`` header, then the ``session_id`` cookie.
    """

    session_id = request.headers.get(SESSION_HEADER) or request.cookies.get(SESSION_COOKIE)
    if session_id:
        return session_id, False
    return mint_session_id(), True


def client_info_from_request(request: Request) -> dict[str, Any]:
    """Collect request metadata attached to analytics records."""

    return {
        "ip": client_key_from_request(request),
        "user_agent": request.headers.get("user-agent"),
        "referer": request.headers.get("referer"),
        "accept_language": request.headers.get("accept-language"),
    }
