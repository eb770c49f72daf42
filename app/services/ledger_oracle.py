"""Solana JSON-RPC client used to confirm vote transactions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class LedgerState(StrEnum):
    """Three-way outcome of a signature status lookup."""

    CONFIRMED = "confirmed"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SignatureStatus:
    """Outcome of one lookup plus the raw RPC value for diagnostics."""

    state: LedgerState
    raw: dict[str, Any] | None = None

    @property
    def confirmed(self) -> bool:
        return self.state is LedgerState.CONFIRMED


def classify_status(raw: dict[str, Any] | None, min_commitment: str) -> LedgerState:
    """Reduce a ``getSignatureStatuses`` entry to a ledger state."""
    if not raw:
        return LedgerState.UNKNOWN
    if raw.get("err") is not None:
        return LedgerState.FAILED

    required = COMMITMENT_RANK.get(min_commitment, COMMITMENT_RANK["confirmed"])
    reached = raw.get("confirmationStatus")
    if reached is None:
        # Pre-1.5 nodes omit confirmationStatus.
        return LedgerState.CONFIRMED
    if COMMITMENT_RANK.get(reached, -1) < required:
        return LedgerState.UNKNOWN
    return LedgerState.CONFIRMED


class SolanaLedgerOracle:
    """Query transaction confirmation status from a Solana RPC node."""

    def __init__(
        self,
        rpc_url: str | None = None,
        timeout_seconds: float | None = None,
        min_commitment: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.rpc_url = rpc_url or settings.solana_rpc_url
        self.min_commitment = min_commitment or settings.ledger_commitment
        timeout = (
            timeout_seconds if timeout_seconds is not None else settings.ledger_timeout_seconds
        )
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )

    async def signature_status(self, signature: str) -> SignatureStatus:
        """Return the ledger state of ``signature``.

        Timeouts and transport failures are reported as UNKNOWN so the
        caller can reject the claim and let the client retry later.
        """
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getSignatureStatuses",
            "params": [[signature], {"searchTransactionHistory": True}],
        }
        try:
            response = await self._http.post(self.rpc_url, json=body)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            logger.warning("Ledger status lookup timed out for %s", signature)
            return SignatureStatus(LedgerState.UNKNOWN)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Ledger status lookup failed for %s: %s", signature, exc)
            return SignatureStatus(LedgerState.UNKNOWN)

        if payload.get("error"):
            logger.warning("Ledger RPC error for %s: %s", signature, payload["error"])
            return SignatureStatus(LedgerState.UNKNOWN)

        values = (payload.get("result") or {}).get("value") or []
        raw = values[0] if values else None
        return SignatureStatus(classify_status(raw, self.min_commitment), raw)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this oracle created it."""
        if self._owns_client:
            await self._http.aclose()
