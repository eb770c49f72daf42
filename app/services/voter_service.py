"""Voter registry and wallet linking."""

from __future__ import annotations

from typing import Any

from app.schemas.voter import VoterCreate, VoterUpdate
from app.services.common import SupabaseService
from app.utils.errors import ConflictError, DuplicateRecordError, NotFoundError
from app.utils.time import now_iso
from supabase import AsyncClient


class VoterService:
    """Manage voters and their 1:1 wallet bindings."""

    def __init__(self, client: AsyncClient) -> None:
        self.db = SupabaseService(client)

    async def list_voters(self) -> list[dict[str, Any]]:
        """Return all voters, newest first."""
        return await self.db.select_many("voters", order_by="created_at", descending=True)

    async def create(self, payload: VoterCreate) -> dict[str, Any]:
        """Register a voter; matric must be unique."""
        try:
            return await self.db.insert_one(
                "voters",
                {
                    "name": payload.name,
                    "matric": payload.matric,
                    "email": payload.email,
                    "department": payload.department,
                    "eligible": payload.eligible,
                },
            )
        except DuplicateRecordError as exc:
            raise ConflictError("matric already exists", code="MATRIC_EXISTS") from exc

    async def update(self, voter_id: int, payload: VoterUpdate) -> dict[str, Any]:
        """Apply a partial update to a voter."""
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return await self.db.select_one("voters", {"id": voter_id}, not_found_label="Voter")
        try:
            rows = await self.db.update("voters", {"id": voter_id}, changes)
        except DuplicateRecordError as exc:
            raise ConflictError("matric already exists", code="MATRIC_EXISTS") from exc
        if not rows:
            raise NotFoundError("Voter")
        return rows[0]

    async def delete(self, voter_id: int) -> None:
        """Remove a voter."""
        rows = await self.db.delete("voters", {"id": voter_id})
        if not rows:
            raise NotFoundError("Voter")

    async def verify(self, matric: str) -> dict[str, Any] | None:
        """Return the voter for ``matric`` when registered and eligible."""
        voter = await self.db.select_first("voters", {"matric": matric.strip()})
        if voter is None or voter.get("eligible") is False:
            return None
        return voter

    async def link_wallet(self, matric: str, wallet_address: str) -> dict[str, Any]:
        """Bind ``wallet_address`` to the voter with ``matric``.

        A wallet maps to at most one voter and a voter to at most one
        wallet. Re-linking the same pair is a no-op apart from refreshing
        the verification timestamp.
        """
        voter = await self.db.select_one("voters", {"matric": matric}, not_found_label="matric")
        current = voter.get("wallet_address")
        if current and current != wallet_address:
            raise ConflictError("matric already linked to a wallet", code="MATRIC_LINKED")

        owner = await self.db.select_first("voters", {"wallet_address": wallet_address})
        if owner is not None and owner["matric"] != matric:
            raise ConflictError("wallet already linked to another matric", code="WALLET_LINKED")

        try:
            rows = await self.db.update(
                "voters",
                {"matric": matric},
                {
                    "wallet_address": wallet_address,
                    "wallet_verified": True,
                    "wallet_verified_at": now_iso(),
                },
            )
        except DuplicateRecordError as exc:
            raise ConflictError("wallet already linked", code="WALLET_LINKED") from exc
        return rows[0] if rows else voter

    async def mark_wallet_verified(self, wallet_address: str) -> None:
        """Flag any voter bound to ``wallet_address`` as verified."""
        await self.db.update(
            "voters",
            {"wallet_address": wallet_address},
            {"wallet_verified": True, "wallet_verified_at": now_iso()},
        )
