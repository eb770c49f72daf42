"""Wallet sign-in endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from app.config import settings
from app.dependencies import get_db_client
from app.schemas.auth import NonceRequest, NonceResponse, VerifyRequest, VerifyResponse
from app.services.auth_service import AuthService
from supabase import AsyncClient

router = APIRouter()


@router.post("/nonce", response_model=NonceResponse)
async def issue_nonce(
    payload: NonceRequest,
    request: Request,
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Issue a one-time nonce for the wallet to sign."""
    service = AuthService(client)
    nonce = service.issue_nonce(payload.address)
    return {
        "nonce": nonce,
        "statement": f"{settings.sign_in_statement} ({settings.solana_network.title()})",
        "domain": request.url.hostname or "",
    }


@router.post("/verify", response_model=VerifyResponse)
async def verify_signature(
    payload: VerifyRequest,
    response: Response,
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Verify a signed nonce and set the session cookie."""
    service = AuthService(client)
    user, token = await service.verify(
        address=payload.address.strip(),
        signature=payload.signature,
        nonce=payload.nonce,
    )
    response.set_cookie(
        settings.auth_cookie_name,
        token,
        max_age=settings.jwt_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.auth_cookie_secure,
    )
    return {"ok": True, "role": user["role"]}


@router.post("/logout")
async def logout(response: Response) -> dict:
    """Clear the session cookie."""
    response.delete_cookie(settings.auth_cookie_name)
    return {"ok": True}
