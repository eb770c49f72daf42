"""API router package."""

from app.routers import admin, auth, elections, stats, voters, votes

__all__ = [
    "admin",
    "auth",
    "elections",
    "stats",
    "voters",
    "votes",
]
