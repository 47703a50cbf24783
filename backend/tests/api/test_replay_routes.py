"""Replay routes — permission guards, CRUD round trip, listing validation.

Invariants:
    - No token → 401; malformed / unknown token → 401; inactive → 403; missing code → 403
    - POST → 201 with Location; PATCH bumps version; DELETE twice → 404
    - X-Expected-Version mismatch → 409
    - Bad query parameters → 422 with per-field details
"""

import pytest

from dotareplays.core.domain_types import PermissionCode

READ = PermissionCode.REPLAYS_READ
WRITE = PermissionCode.REPLAYS_WRITE

HEROES = ["Axe", "Lina", "Pudge", "Sven", "Zeus", "Tiny", "Lion", "Viper", "Razor", "Mirana"]
BODY = {"title": "TI9 Grand Final", "year": 2019, "runtime": "45 mins", "heroes": HEROES}


@pytest.fixture
async def writer(auth_header):
    return await auth_header(READ, WRITE)


@pytest.fixture
async def reader(auth_header):
    return await auth_header(READ)


@pytest.fixture
async def created(client, writer):
    res = await client.post("/v1/replays", json=BODY, headers=writer)
    assert res.status_code == 201
    return res.json()["replay"]


# ─── Guards ──────────────────────────────────────────────────────

async def test_anonymous_is_401(client):
    res = await client.get("/v1/replays")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"
    assert res.headers["www-authenticate"] == "Bearer"


@pytest.mark.parametrize("header", [
    "Token abc",
    "Bearer",
    "Bearer " + "A" * 25,
    "Bearer " + "A" * 26,
])
async def test_bad_token_is_401(client, header):
    res = await client.get("/v1/replays", headers={"Authorization": header})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "INVALID_AUTHENTICATION_TOKEN"


async def test_inactive_account_is_403(client, auth_header):
    headers = await auth_header(READ, activated=False)
    res = await client.get("/v1/replays", headers=headers)
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "INACTIVE_ACCOUNT"


async def test_reader_cannot_write(client, reader):
    res = await client.post("/v1/replays", json=BODY, headers=reader)
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "NOT_PERMITTED"


async def test_user_without_codes_cannot_read(client, auth_header):
    headers = await auth_header()
    res = await client.get("/v1/replays", headers=headers)
    assert res.status_code == 403


# ─── CRUD ────────────────────────────────────────────────────────

async def test_create_returns_location(client, writer):
    res = await client.post("/v1/replays", json=BODY, headers=writer)
    assert res.status_code == 201
    replay = res.json()["replay"]
    assert res.headers["location"] == f"/v1/replays/{replay['id']}"
    assert replay["runtime"] == "45 mins"
    assert replay["version"] == 1


async def test_create_invalid_replay_is_422(client, writer):
    res = await client.post(
        "/v1/replays", json={**BODY, "year": 2009, "heroes": HEROES[:3]}, headers=writer,
    )
    assert res.status_code == 422
    details = res.json()["error"]["details"]
    assert set(details) == {"year", "heroes"}


async def test_create_with_unknown_field_is_400(client, writer):
    res = await client.post("/v1/replays", json={**BODY, "version": 9}, headers=writer)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "BAD_REQUEST"


async def test_create_with_bad_runtime_text_is_400(client, writer):
    res = await client.post("/v1/replays", json={**BODY, "runtime": "45 minutes"}, headers=writer)
    assert res.status_code == 400


async def test_show(client, reader, created):
    res = await client.get(f"/v1/replays/{created['id']}", headers=reader)
    assert res.status_code == 200
    assert res.json()["replay"]["title"] == BODY["title"]


@pytest.mark.parametrize("replay_id", ["abc", "0", "-4", "99999"])
async def test_show_unknown_is_404(client, reader, replay_id):
    res = await client.get(f"/v1/replays/{replay_id}", headers=reader)
    assert res.status_code == 404


async def test_partial_update(client, writer, created):
    res = await client.patch(
        f"/v1/replays/{created['id']}", json={"runtime": 50}, headers=writer,
    )
    assert res.status_code == 200
    replay = res.json()["replay"]
    assert replay["runtime"] == "50 mins"
    assert replay["title"] == BODY["title"]
    assert replay["version"] == 2


async def test_update_with_matching_expected_version(client, writer, created):
    res = await client.patch(
        f"/v1/replays/{created['id']}", json={"title": "Renamed"},
        headers={**writer, "X-Expected-Version": "1"},
    )
    assert res.status_code == 200


async def test_update_with_stale_expected_version_is_409(client, writer, created):
    await client.patch(f"/v1/replays/{created['id']}", json={"runtime": 50}, headers=writer)
    res = await client.patch(
        f"/v1/replays/{created['id']}", json={"runtime": 60},
        headers={**writer, "X-Expected-Version": "1"},
    )
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "EDIT_CONFLICT"


async def test_update_failing_validation_is_422(client, writer, created):
    res = await client.patch(
        f"/v1/replays/{created['id']}", json={"title": ""}, headers=writer,
    )
    assert res.status_code == 422
    assert res.json()["error"]["details"] == {"title": "must be provided"}


async def test_delete_twice(client, writer, created):
    res = await client.delete(f"/v1/replays/{created['id']}", headers=writer)
    assert res.status_code == 200
    assert res.json() == {"message": "replay successfully deleted"}

    res = await client.delete(f"/v1/replays/{created['id']}", headers=writer)
    assert res.status_code == 404


# ─── Listing ─────────────────────────────────────────────────────

async def test_list_with_metadata(client, writer, reader):
    for i in range(3):
        await client.post("/v1/replays", json={**BODY, "title": f"Game {i}"}, headers=writer)

    res = await client.get("/v1/replays?page_size=2&sort=-id", headers=reader)
    assert res.status_code == 200
    body = res.json()
    assert [r["title"] for r in body["replays"]] == ["Game 2", "Game 1"]
    assert body["metadata"] == {
        "current_page": 1, "page_size": 2, "first_page": 1,
        "last_page": 2, "total_records": 3,
    }


async def test_list_filters_by_heroes_and_title(client, writer, reader):
    await client.post("/v1/replays", json=BODY, headers=writer)
    others = ["Io", "Chen", "Enigma", "Tinker", "Meepo", "Oracle", "Mars", "Void", "Ursa", "Axe"]
    await client.post(
        "/v1/replays", json={**BODY, "title": "Regional Qualifier", "heroes": others},
        headers=writer,
    )

    res = await client.get("/v1/replays?heroes=Axe,Pudge", headers=reader)
    assert [r["title"] for r in res.json()["replays"]] == [BODY["title"]]

    res = await client.get("/v1/replays?title=qualifier", headers=reader)
    assert [r["title"] for r in res.json()["replays"]] == ["Regional Qualifier"]


async def test_list_empty(client, reader):
    res = await client.get("/v1/replays", headers=reader)
    assert res.status_code == 200
    assert res.json()["replays"] == []
    assert res.json()["metadata"]["total_records"] == 0


@pytest.mark.parametrize("query,field", [
    ("page=abc", "page"),
    ("page=0", "page"),
    ("page_size=101", "page_size"),
    ("sort=created_at", "sort"),
])
async def test_list_rejects_bad_query(client, reader, query, field):
    res = await client.get(f"/v1/replays?{query}", headers=reader)
    assert res.status_code == 422
    assert field in res.json()["error"]["details"]


# ─── Server faults ───────────────────────────────────────────────

async def test_store_fault_is_opaque_500(client, reader, monkeypatch):
    from dotareplays.core.errors import PersistenceError
    from dotareplays.services.replay_store import ReplayStore

    async def failing_get(self, replay_id):
        raise PersistenceError("password authentication failed for user replays", "replay.get")

    monkeypatch.setattr(ReplayStore, "get", failing_get)
    res = await client.get("/v1/replays/1", headers=reader)
    assert res.status_code == 500
    assert "password" not in res.text
    assert res.json()["error"]["code"] == "DATABASE_ERROR"


async def test_unexpected_exception_is_opaque_500(client, reader, monkeypatch):
    from httpx import ASGITransport, AsyncClient

    from dotareplays.core.errors import MissingCredentialHash
    from dotareplays.main import app
    from dotareplays.services.replay_store import ReplayStore

    async def broken_get(self, replay_id):
        raise MissingCredentialHash("internal detail")

    monkeypatch.setattr(ReplayStore, "get", broken_get)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as raw:
        res = await raw.get("/v1/replays/1", headers=reader)
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "INTERNAL_ERROR"
    assert "internal detail" not in res.text
