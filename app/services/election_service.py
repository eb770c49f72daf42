"""Election and candidate management."""

from __future__ import annotations

import logging
from typing import Any

from app.schemas.election import ElectionCreate, ElectionStatus
from app.services.common import SupabaseService
from app.utils.errors import NotFoundError
from app.utils.time import now_utc
from supabase import AsyncClient

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = "id,title,description,level,status,start_date,end_date"


class ElectionService:
    """Read and administer elections."""

    def __init__(self, client: AsyncClient) -> None:
        self.db = SupabaseService(client)

    async def _candidates(self, election_id: int) -> list[dict[str, Any]]:
        return await self.db.select_many(
            "candidates", filters={"election_id": election_id}, order_by="id"
        )

    async def _hydrate(self, election: dict[str, Any]) -> dict[str, Any]:
        payload = dict(election)
        payload["candidates"] = await self._candidates(int(election["id"]))
        return payload

    async def list_active(self) -> list[dict[str, Any]]:
        """Return active elections without candidates, latest start first."""
        return await self.db.select_many(
            "elections",
            filters={"status": ElectionStatus.ACTIVE.value},
            columns=SUMMARY_COLUMNS,
            order_by="start_date",
            descending=True,
        )

    async def active(self) -> dict[str, Any] | None:
        """Return the first active election with its candidates."""
        election = await self.db.select_first("elections", {"status": ElectionStatus.ACTIVE.value})
        if election is None:
            return None
        return await self._hydrate(election)

    async def get(self, election_id: int) -> dict[str, Any]:
        """Return one election with its candidates."""
        election = await self.db.select_one(
            "elections", {"id": election_id}, not_found_label="Election"
        )
        return await self._hydrate(election)

    async def list_all(self) -> list[dict[str, Any]]:
        """Return every election with candidates (admin view)."""
        elections = await self.db.select_many("elections", order_by="id")
        return [await self._hydrate(election) for election in elections]

    async def create(self, payload: ElectionCreate) -> dict[str, Any]:
        """Create an active election together with its candidates."""
        election = await self.db.insert_one(
            "elections",
            {
                "title": payload.title,
                "description": payload.description,
                "level": payload.level.value,
                "status": ElectionStatus.ACTIVE.value,
                "start_date": payload.start_date.isoformat(),
                "end_date": payload.end_date.isoformat(),
            },
        )
        election_id = int(election["id"])
        try:
            candidates = await self.db.insert_many(
                "candidates",
                [
                    {**candidate.model_dump(), "election_id": election_id}
                    for candidate in payload.candidates
                ],
            )
        except Exception:
            # Never leave an election without its ballot.
            logger.warning("Candidate insert failed; removing election %s", election_id)
            await self.db.delete("elections", {"id": election_id})
            raise
        logger.info("Election %s created with %s candidates", election_id, len(candidates))
        return {**election, "candidates": candidates}

    async def set_status(self, election_id: int, status: ElectionStatus) -> dict[str, Any]:
        """Move an election to ``status``."""
        rows = await self.db.update("elections", {"id": election_id}, {"status": status.value})
        if not rows:
            raise NotFoundError("Election")
        return rows[0]

    async def complete_expired(self) -> int:
        """Mark active elections whose end date has passed as completed."""
        cutoff = now_utc().isoformat()
        rows = await self.db.execute(
            self.db.client.table("elections")
            .update({"status": ElectionStatus.COMPLETED.value})
            .eq("status", ElectionStatus.ACTIVE.value)
            .lt("end_date", cutoff),
            default=[],
        )
        return len(rows)
