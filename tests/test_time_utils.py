"""Time helper tests."""

from __future__ import annotations

from datetime import datetime, timedelta

from app.utils.time import now_iso, now_utc


def test_now_utc_is_timezone_aware() -> None:
    assert now_utc().utcoffset() == timedelta(0)


def test_now_iso_round_trips_with_offset() -> None:
    """ISO strings written to the database carry an explicit UTC offset."""
    value = now_iso()
    assert value.endswith("+00:00")
    assert datetime.fromisoformat(value).utcoffset() == timedelta(0)
