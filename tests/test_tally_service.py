"""Tally aggregation tests."""

from __future__ import annotations

import pytest

from app.services.tally_service import TallyService


def _vote(fake_db, signature: str, election_id: int, candidate_id: int, name: str) -> None:
    fake_db.seed(
        "votes",
        signature=signature,
        election_id=election_id,
        candidate_id=candidate_id,
        candidate_name=name,
        matric=f"MAT-{signature}",
        wallet_address="W" * 44,
    )


@pytest.mark.anyio
async def test_empty_election_returns_empty_list(fake_db) -> None:
    assert await TallyService(fake_db).stats(1) == []


@pytest.mark.anyio
async def test_counts_grouped_by_candidate_and_scoped_to_election(fake_db) -> None:
    _vote(fake_db, "sig-0000001", 1, 10, "Ada")
    _vote(fake_db, "sig-0000002", 1, 10, "Ada")
    _vote(fake_db, "sig-0000003", 1, 11, "Bola")
    _vote(fake_db, "sig-0000004", 2, 20, "Chidi")

    stats = await TallyService(fake_db).stats(1)

    counts = {item.candidate_id: (item.candidate_name, item.votes) for item in stats}
    assert counts == {10: ("Ada", 2), 11: ("Bola", 1)}


@pytest.mark.anyio
async def test_candidate_name_comes_from_the_vote_rows(fake_db) -> None:
    """A later rename of the candidate does not rewrite historical tallies."""
    fake_db.seed("candidates", election_id=1, name="Renamed")
    _vote(fake_db, "sig-0000001", 1, 10, "Original")

    stats = await TallyService(fake_db).stats(1)
    assert stats[0].candidate_name == "Original"


@pytest.mark.anyio
async def test_wire_shape_uses_camel_case(fake_db) -> None:
    _vote(fake_db, "sig-0000001", 1, 10, "Ada")
    stats = await TallyService(fake_db).stats(1)
    assert stats[0].model_dump(by_alias=True) == {
        "candidateId": 10,
        "candidateName": "Ada",
        "votes": 1,
    }
