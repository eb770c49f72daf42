"""Tally query and live tally stream endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from app.dependencies import get_broadcaster, get_db_client
from app.schemas.vote import CandidateTally
from app.services.broadcast import TallyBroadcaster
from app.services.tally_service import TallyService
from supabase import AsyncClient

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/stats/{election_id}", response_model=list[CandidateTally])
async def get_stats(
    election_id: int,
    client: AsyncClient = Depends(get_db_client),
) -> list[CandidateTally]:
    """Return vote counts per candidate for an election."""
    return await TallyService(client).stats(election_id)


@router.get("/stream/{election_id}")
async def stream_stats(
    election_id: int,
    broadcaster: TallyBroadcaster = Depends(get_broadcaster),
) -> StreamingResponse:
    """Push tally snapshots for an election as server-sent events."""
    return StreamingResponse(
        broadcaster.stream(election_id),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
