"""Vote intake: ledger confirmation, exactly-once persistence, tally fan-out."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from app.config import settings
from app.schemas.vote import VoteCreate
from app.services.broadcast import TallyBroadcaster
from app.services.common import SupabaseService
from app.services.ledger_oracle import SolanaLedgerOracle
from app.utils.errors import (
    ConflictError,
    DuplicateRecordError,
    InvalidInputError,
    LedgerUnconfirmedError,
)
from app.utils.time import now_iso
from supabase import AsyncClient

logger = logging.getLogger(__name__)

_bookkeeping_tasks: set[asyncio.Task] = set()


@dataclass(frozen=True)
class VoteOutcome:
    """Result of a vote submission.

    ``duplicate`` is True when the ledger signature had already been
    accepted; the caller treats that as success.
    """

    vote: dict[str, Any] | None
    duplicate: bool = False


class VoteService:
    """Accept ledger-confirmed votes and query recorded ones."""

    def __init__(
        self,
        client: AsyncClient,
        oracle: SolanaLedgerOracle | None = None,
        broadcaster: TallyBroadcaster | None = None,
        enforce_one_vote_per_voter: bool | None = None,
    ) -> None:
        self.db = SupabaseService(client)
        self.oracle = oracle
        self.broadcaster = broadcaster
        self.enforce_one_vote_per_voter = (
            settings.enforce_one_vote_per_voter
            if enforce_one_vote_per_voter is None
            else enforce_one_vote_per_voter
        )

    async def submit(self, claim: VoteCreate) -> VoteOutcome:
        """Record ``claim`` once its transaction is confirmed on the ledger.

        Raises:
            InvalidInputError: the claim targets an unsupported network.
            ConflictError: the matric already voted with another signature
                (only when one-vote-per-voter is enforced).
            LedgerUnconfirmedError: the ledger has no status for the
                signature yet, or reports it failed. Nothing is stored.
            PersistenceError: storage failed for a reason other than a
                duplicate signature.
        """
        if claim.network != settings.solana_network:
            raise InvalidInputError(f"Unsupported network: {claim.network}")

        if self.enforce_one_vote_per_voter:
            previous = await self.db.select_first(
                "votes", {"election_id": claim.election_id, "matric": claim.matric}
            )
            if previous is not None:
                if previous["signature"] == claim.signature:
                    return VoteOutcome(previous, duplicate=True)
                raise ConflictError(
                    "This matric has already voted in this election", code="ALREADY_VOTED"
                )

        status = await self.oracle.signature_status(claim.signature)
        if not status.confirmed:
            logger.warning("Rejecting vote %s: ledger status %s", claim.signature, status.state)
            raise LedgerUnconfirmedError(status.state.value, status.raw)

        try:
            saved = await self.db.insert_one("votes", self._vote_row(claim))
        except DuplicateRecordError:
            existing = await self.db.select_first("votes", {"signature": claim.signature})
            if existing is None:
                # Unique index on (election_id, matric) fired, not the signature one.
                raise ConflictError(
                    "This matric has already voted in this election", code="ALREADY_VOTED"
                ) from None
            logger.info("Duplicate vote signature %s accepted idempotently", claim.signature)
            return VoteOutcome(existing, duplicate=True)

        logger.info(
            "Vote %s recorded for election %s candidate %s",
            claim.signature,
            claim.election_id,
            claim.candidate_id,
        )
        task = asyncio.create_task(self._record_voter_activity(claim))
        _bookkeeping_tasks.add(task)
        task.add_done_callback(_bookkeeping_tasks.discard)
        if self.broadcaster is not None:
            self.broadcaster.notify(claim.election_id)
        return VoteOutcome(saved)

    @staticmethod
    def _vote_row(claim: VoteCreate) -> dict[str, Any]:
        return {
            "signature": claim.signature,
            "election_id": claim.election_id,
            "candidate_id": claim.candidate_id,
            "candidate_name": claim.candidate_name,
            "matric": claim.matric,
            "wallet_address": claim.wallet_address,
            "network": claim.network,
        }

    async def _record_voter_activity(self, claim: VoteCreate) -> None:
        """Update the voter's last-vote bookkeeping; never fails the vote."""
        try:
            await self.db.update(
                "voters",
                {"matric": claim.matric},
                {
                    "last_vote_signature": claim.signature,
                    "last_vote_at": now_iso(),
                    "wallet_address": claim.wallet_address,
                },
            )
        except Exception:
            logger.exception("Could not update last-vote details for matric %s", claim.matric)

    @staticmethod
    async def drain() -> None:
        """Wait for outstanding voter bookkeeping updates."""
        while _bookkeeping_tasks:
            await asyncio.gather(*list(_bookkeeping_tasks), return_exceptions=True)

    async def list_votes(self, election_id: int | None = None) -> list[dict[str, Any]]:
        """Return votes, optionally limited to one election."""
        filters = {"election_id": election_id} if election_id is not None else None
        return await self.db.select_many("votes", filters=filters, order_by="created_at")

    async def get_by_signature(self, signature: str) -> dict[str, Any]:
        """Return the vote recorded for a ledger signature."""
        return await self.db.select_one("votes", {"signature": signature}, not_found_label="Vote")

    async def has_voted(self, election_id: int, matric: str) -> bool:
        """Return whether ``matric`` has a vote recorded in ``election_id``."""
        existing = await self.db.select_first(
            "votes", {"election_id": election_id, "matric": matric}, columns="id"
        )
        return existing is not None
