"""Admin-only election management endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_db_client, require_admin
from app.schemas.election import (
    ElectionCreate,
    ElectionResponse,
    ElectionStatusUpdate,
    ElectionSummary,
)
from app.services.election_service import ElectionService
from supabase import AsyncClient

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/elections", response_model=ElectionResponse)
async def create_election(
    payload: ElectionCreate,
    client: AsyncClient = Depends(get_db_client),
) -> dict[str, Any]:
    """Create an election with its candidates."""
    return await ElectionService(client).create(payload)


@router.get("/elections", response_model=list[ElectionResponse])
async def list_elections(client: AsyncClient = Depends(get_db_client)) -> list[dict[str, Any]]:
    """Return every election with candidates."""
    return await ElectionService(client).list_all()


@router.patch("/elections/{election_id}/status", response_model=ElectionSummary)
async def update_election_status(
    election_id: int,
    payload: ElectionStatusUpdate,
    client: AsyncClient = Depends(get_db_client),
) -> dict[str, Any]:
    """Change an election's status."""
    return await ElectionService(client).set_status(election_id, payload.status)
