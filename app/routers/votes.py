"""Vote submission and lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_broadcaster, get_db_client, get_ledger_oracle
from app.schemas.vote import (
    DuplicateVoteResponse,
    HasVotedResponse,
    VoteCreate,
    VoteResponse,
)
from app.services.broadcast import TallyBroadcaster
from app.services.ledger_oracle import SolanaLedgerOracle
from app.services.vote_service import VoteService
from supabase import AsyncClient

router = APIRouter()


@router.post("", response_model=VoteResponse | DuplicateVoteResponse)
async def submit_vote(
    payload: VoteCreate,
    client: AsyncClient = Depends(get_db_client),
    oracle: SolanaLedgerOracle = Depends(get_ledger_oracle),
    broadcaster: TallyBroadcaster = Depends(get_broadcaster),
) -> dict:
    """Record a vote whose ledger transaction has been confirmed."""
    service = VoteService(client, oracle=oracle, broadcaster=broadcaster)
    outcome = await service.submit(payload)
    if outcome.duplicate:
        return DuplicateVoteResponse().model_dump()
    return outcome.vote


@router.get("", response_model=list[VoteResponse])
async def list_votes(
    election_id: int | None = Query(default=None, alias="electionId"),
    client: AsyncClient = Depends(get_db_client),
) -> list[dict]:
    """Return recorded votes, optionally for one election."""
    return await VoteService(client).list_votes(election_id)


@router.get("/hasVoted", response_model=HasVotedResponse)
async def has_voted(
    election_id: str = Query(default="", alias="electionId"),
    matric: str = "",
    client: AsyncClient = Depends(get_db_client),
) -> dict:
    """Report whether a matric already voted in an election.

    Malformed queries get ``ok: false`` rather than a validation error.
    """
    matric = matric.strip()
    try:
        parsed_id = int(election_id)
    except ValueError:
        parsed_id = None
    if parsed_id is None or not matric:
        return {"ok": False, "has_voted": False}
    voted = await VoteService(client).has_voted(parsed_id, matric)
    return {"ok": True, "has_voted": voted}


@router.get("/{signature}", response_model=VoteResponse)
async def get_vote(signature: str, client: AsyncClient = Depends(get_db_client)) -> dict:
    """Return the vote recorded for a ledger signature."""
    return await VoteService(client).get_by_signature(signature)
