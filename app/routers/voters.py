"""Voter registry endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_db_client, require_admin
from app.schemas.voter import VoterCreate, VoterResponse, VoterUpdate, WalletLinkRequest
from app.services.voter_service import VoterService
from app.utils.errors import InvalidInputError
from supabase import AsyncClient

router = APIRouter()


def _serialize(voter: dict) -> dict:
    return VoterResponse.model_validate(voter).model_dump(mode="json", by_alias=True)


@router.get("", response_model=list[VoterResponse])
async def list_voters(client: AsyncClient = Depends(get_db_client)) -> list[dict]:
    """Return every registered voter."""
    return await VoterService(client).list_voters()


@router.post("", response_model=VoterResponse, status_code=201)
async def create_voter(
    payload: VoterCreate,
    _: Any = Depends(require_admin),
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Register a voter."""
    return await VoterService(client).create(payload)


@router.patch("/{voter_id}", response_model=VoterResponse)
async def update_voter(
    voter_id: int,
    payload: VoterUpdate,
    _: Any = Depends(require_admin),
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Update a voter's details."""
    return await VoterService(client).update(voter_id, payload)


@router.delete("/{voter_id}")
async def delete_voter(
    voter_id: int,
    _: Any = Depends(require_admin),
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Delete a voter."""
    await VoterService(client).delete(voter_id)
    return {"ok": True}


@router.get("/verify/{matric}")
async def verify_voter(matric: str, client: AsyncClient = Depends(get_db_client)) -> dict:
    """Report whether a matric belongs to an eligible voter."""
    if not matric.strip():
        raise InvalidInputError("matric required")
    voter = await VoterService(client).verify(matric)
    if voter is None:
        return {"ok": False}
    return {"ok": True, "voter": _serialize(voter)}


@router.post("/wallet")
async def link_wallet(
    payload: WalletLinkRequest,
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Attach a connected wallet to a voter."""
    voter = await VoterService(client).link_wallet(payload.matric, payload.wallet_address)
    return {"ok": True, "voter": _serialize(voter)}
