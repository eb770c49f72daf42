"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "AuthService": "app.services.auth_service",
    "ElectionService": "app.services.election_service",
    "InMemoryPubSub": "app.services.broadcast",
    "SolanaLedgerOracle": "app.services.ledger_oracle",
    "SupabaseService": "app.services.common",
    "TallyBroadcaster": "app.services.broadcast",
    "TallyService": "app.services.tally_service",
    "VoteService": "app.services.vote_service",
    "VoterService": "app.services.voter_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
