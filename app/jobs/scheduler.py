"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.config import settings
from app.jobs.election_sweep import close_expired_elections
from app.jobs.nonce_purge import purge_expired_nonces

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("election_sweep") is None:
        scheduler.add_job(
            close_expired_elections,
            IntervalTrigger(minutes=max(1, settings.election_sweep_minutes)),
            id="election_sweep",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    if scheduler.get_job("nonce_purge") is None:
        scheduler.add_job(
            purge_expired_nonces,
            IntervalTrigger(minutes=max(1, settings.nonce_purge_minutes)),
            id="nonce_purge",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
