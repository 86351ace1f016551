"""Shared-secret bearer token checks for agent and dashboard callers."""

from __future__ import annotations

import hmac
from typing import Optional

from update_manager.core.metrics import AGENT_AUTH_FAILURES_TOTAL
from update_manager.domain.exceptions import UnauthorizedError

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):]


def verify_bearer_token(
    authorization: Optional[str],
    expected: str,
    *,
    surface: str = "agent",
) -> None:
    """Raise ``UnauthorizedError`` unless the header carries ``expected``.

    An unconfigured secret rejects every caller.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        AGENT_AUTH_FAILURES_TOTAL.labels(surface=surface, reason="missing").inc()
        raise UnauthorizedError("Unauthorized: Missing API key")

    if not expected or not hmac.compare_digest(token.encode(), expected.encode()):
        AGENT_AUTH_FAILURES_TOTAL.labels(surface=surface, reason="invalid").inc()
        raise UnauthorizedError("Unauthorized: Invalid API key")
