"""Election read and admin endpoints, plus the expiry sweep."""

from __future__ import annotations

import pytest

from app.services.election_service import ElectionService


def election_body(**overrides) -> dict:
    body = {
        "title": "SRC President",
        "description": "Students' Representative Council",
        "level": "UNIVERSITY",
        "startDate": "2026-03-01T08:00:00+00:00",
        "endDate": "2026-03-02T18:00:00+00:00",
        "candidates": [
            {"name": "Ada", "department": "Sci", "level": "400", "avatar": "A", "color": "#f00"},
            {"name": "Bola", "department": "Law", "level": "300", "avatar": "B", "color": "#00f"},
        ],
    }
    body.update(overrides)
    return body


def test_admin_creates_active_election_with_candidates(api_client, admin_cookie) -> None:
    api_client.cookies.update(admin_cookie)

    response = api_client.post("/admin/elections", json=election_body())

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ACTIVE"
    assert [c["name"] for c in payload["candidates"]] == ["Ada", "Bola"]
    assert {c["electionId"] for c in payload["candidates"]} == {payload["id"]}

    listed = api_client.get("/admin/elections").json()
    assert len(listed) == 1 and len(listed[0]["candidates"]) == 2


def test_election_needs_two_candidates(api_client, admin_cookie) -> None:
    api_client.cookies.update(admin_cookie)
    body = election_body(candidates=election_body()["candidates"][:1])

    assert api_client.post("/admin/elections", json=body).status_code == 422


def test_public_election_views(api_client, admin_cookie) -> None:
    assert api_client.get("/api/elections/active").json() == {}

    api_client.cookies.update(admin_cookie)
    election_id = api_client.post("/admin/elections", json=election_body()).json()["id"]
    api_client.cookies.clear()

    active = api_client.get("/api/elections").json()
    assert [e["id"] for e in active] == [election_id]
    assert "candidates" not in active[0]

    current = api_client.get("/api/elections/active").json()
    assert current["id"] == election_id and len(current["candidates"]) == 2

    assert api_client.get(f"/api/elections/{election_id}").json()["title"] == "SRC President"
    assert api_client.get("/api/elections/999").status_code == 404


def test_status_update_is_validated(api_client, admin_cookie) -> None:
    api_client.cookies.update(admin_cookie)
    election_id = api_client.post("/admin/elections", json=election_body()).json()["id"]

    done = api_client.patch(f"/admin/elections/{election_id}/status", json={"status": "COMPLETED"})
    assert done.json()["status"] == "COMPLETED"
    assert api_client.get("/api/elections").json() == []

    bogus = api_client.patch(
        f"/admin/elections/{election_id}/status", json={"status": "PAUSED"}
    )
    assert bogus.status_code == 422
    missing = api_client.patch("/admin/elections/999/status", json={"status": "ACTIVE"})
    assert missing.status_code == 404


def test_status_update_accepts_lowercase(api_client, admin_cookie) -> None:
    api_client.cookies.update(admin_cookie)
    election_id = api_client.post("/admin/elections", json=election_body()).json()["id"]

    done = api_client.patch(f"/admin/elections/{election_id}/status", json={"status": "completed"})

    assert done.status_code == 200
    assert done.json()["status"] == "COMPLETED"


def test_failed_candidate_insert_leaves_no_election(api_client, admin_cookie, fake_db) -> None:
    api_client.cookies.update(admin_cookie)
    fake_db.fail("candidates", "insert")

    response = api_client.post("/admin/elections", json=election_body())

    assert response.status_code == 500
    assert response.json()["code"] == "PERSISTENCE_ERROR"
    assert fake_db.rows("elections") == []
    assert api_client.get("/api/elections/active").json() == {}


@pytest.mark.anyio
async def test_complete_expired_only_touches_past_active_elections(fake_db) -> None:
    past = fake_db.seed(
        "elections", title="Old", status="ACTIVE", end_date="2020-01-01T00:00:00+00:00"
    )
    future = fake_db.seed(
        "elections", title="New", status="ACTIVE", end_date="2999-01-01T00:00:00+00:00"
    )
    draft = fake_db.seed(
        "elections", title="Draft", status="DRAFT", end_date="2020-01-01T00:00:00+00:00"
    )

    assert await ElectionService(fake_db).complete_expired() == 1

    statuses = {row["id"]: row["status"] for row in fake_db.rows("elections")}
    assert statuses == {past["id"]: "COMPLETED", future["id"]: "ACTIVE", draft["id"]: "DRAFT"}
