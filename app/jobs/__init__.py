"""Background job modules for periodic election tasks."""

from app.jobs.election_sweep import close_expired_elections
from app.jobs.nonce_purge import purge_expired_nonces

__all__ = [
    "close_expired_elections",
    "purge_expired_nonces",
]
