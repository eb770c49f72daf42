"""FastAPI dependency injection helpers."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Request

from app.config import settings
from app.services.auth_service import ROLE_ADMIN, decode_access_token
from app.services.broadcast import TallyBroadcaster
from app.services.ledger_oracle import SolanaLedgerOracle
from app.utils.errors import ForbiddenError, UnauthorizedError
from app.utils.supabase_client import get_service_client
from supabase import AsyncClient


async def get_db_client() -> AsyncClient:
    """Return the service-role Supabase client used by backend services."""
    return await get_service_client()


def get_ledger_oracle(request: Request) -> SolanaLedgerOracle:
    """Return the ledger oracle created during application startup."""
    return request.app.state.ledger_oracle


def get_broadcaster(request: Request) -> TallyBroadcaster:
    """Return the live tally broadcaster created during application startup."""
    return request.app.state.broadcaster


def get_session_claims(request: Request) -> dict[str, Any]:
    """Decode the session cookie.

    Raises:
        UnauthorizedError: 401 if the cookie is missing or the token is
            invalid or expired.
    """
    token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise UnauthorizedError()
    return decode_access_token(token)


def require_admin(claims: dict[str, Any] = Depends(get_session_claims)) -> dict[str, Any]:
    """Allow only sessions carrying the ADMIN role."""
    if claims.get("role") != ROLE_ADMIN:
        raise ForbiddenError("forbidden")
    return claims
