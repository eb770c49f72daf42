"""Public election endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_db_client
from app.schemas.election import ElectionResponse, ElectionSummary
from app.services.election_service import ElectionService
from supabase import AsyncClient

router = APIRouter()


@router.get("", response_model=list[ElectionSummary])
async def list_active_elections(client: AsyncClient = Depends(get_db_client)) -> list[dict]:
    """Return active elections, latest start first."""
    return await ElectionService(client).list_active()


@router.get("/active")
async def get_active_election(client: AsyncClient = Depends(get_db_client)) -> dict:
    """Return the current active election with candidates, or ``{}``."""
    election = await ElectionService(client).active()
    if election is None:
        return {}
    return ElectionResponse.model_validate(election).model_dump(mode="json", by_alias=True)


@router.get("/{election_id}", response_model=ElectionResponse)
async def get_election(election_id: int, client: AsyncClient = Depends(get_db_client)) -> dict:
    """Return one election with candidates."""
    return await ElectionService(client).get(election_id)
