"""Close elections whose voting window has ended."""

from __future__ import annotations

import logging

from app.services.election_service import ElectionService
from app.utils.supabase_client import get_service_client

logger = logging.getLogger(__name__)


async def close_expired_elections() -> None:
    """Move ACTIVE elections past their end date to COMPLETED."""
    client = await get_service_client()
    closed = await ElectionService(client).complete_expired()
    if closed:
        logger.info("close_expired_elections completed %s elections", closed)
