"""Per-candidate vote counting."""

from __future__ import annotations

from app.schemas.vote import CandidateTally
from app.services.common import SupabaseService
from supabase import AsyncClient

TALLY_FUNCTION = "election_tally"


class TallyService:
    """Aggregate persisted votes into per-candidate counts."""

    def __init__(self, client: AsyncClient) -> None:
        self.db = SupabaseService(client)

    async def stats(self, election_id: int) -> list[CandidateTally]:
        """Return vote counts grouped by candidate for one election.

        Grouping happens in the database (``GROUP BY candidate_id,
        candidate_name``) so the snapshot is a single consistent read.
        ``candidate_name`` is the name captured on each vote, not the
        candidate's current display name. Candidates without votes are
        absent and no ordering is guaranteed.
        """
        rows = await self.db.rpc(TALLY_FUNCTION, {"p_election_id": election_id})
        return [
            CandidateTally(
                candidate_id=int(row["candidate_id"]),
                candidate_name=str(row["candidate_name"]),
                votes=int(row["votes"]),
            )
            for row in rows
        ]
