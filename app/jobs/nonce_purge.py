"""Drop sign-in nonces that were never used."""

from __future__ import annotations

import logging

from app.services.auth_service import nonce_store

logger = logging.getLogger(__name__)


async def purge_expired_nonces() -> None:
    """Remove expired entries from the in-process nonce store."""
    removed = nonce_store.purge_expired()
    if removed:
        logger.info("purge_expired_nonces removed %s nonces", removed)
