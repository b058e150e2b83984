"""Admin route tests — provisioning, listing and override behind X-Admin-Key."""

import pytest

from spex.config import get_settings
from spex.core.domain_types import UID_ALPHABET, UID_LENGTH


@pytest.mark.parametrize("method,path", [
    ("post", "/api/admin/create-uid"),
    ("post", "/api/admin/create-uids"),
    ("get", "/api/admin/cards"),
    ("put", "/api/admin/cards/blank00001"),
])
async def test_admin_routes_require_key(client, method, path):
    res = await getattr(client, method)(path)
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "ADMIN_ONLY"


async def test_wrong_admin_key_rejected(client):
    res = await client.post("/api/admin/create-uid", headers={"X-Admin-Key": "guess"})
    assert res.status_code == 401


async def test_unset_admin_key_disables_admin(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "admin_key", "")
    res = await client.post("/api/admin/create-uid", headers={"X-Admin-Key": ""})
    assert res.status_code == 401


async def test_create_uid(client, fetch_card, admin_headers):
    res = await client.post("/api/admin/create-uid", headers=admin_headers)
    assert res.status_code == 200
    uid = res.json()["uid"]
    assert len(uid) == UID_LENGTH
    assert set(uid) <= set(UID_ALPHABET)

    card = await fetch_card(uid)
    assert card is not None
    assert card.claimed_at is None


async def test_create_uids_default_is_one(client, admin_headers):
    res = await client.post("/api/admin/create-uids", headers=admin_headers)
    body = res.json()
    assert body["ok"] is True
    assert len(body["rows"]) == 1


@pytest.mark.parametrize("requested,created", [(5, 5), (0, 1), (-3, 1), (1000, 200)])
async def test_create_uids_clamps_count(client, requested, created, admin_headers):
    res = await client.post(
        "/api/admin/create-uids", json={"count": requested}, headers=admin_headers,
    )
    rows = res.json()["rows"]
    assert len(rows) == created
    assert len({r["uid"] for r in rows}) == created


async def test_list_cards(client, blank_card, admin_headers):
    await client.post("/api/admin/create-uids", json={"count": 3}, headers=admin_headers)

    res = await client.get("/api/admin/cards", headers=admin_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 4
    assert body["take"] == 100
    assert body["skip"] == 0
    assert len(body["rows"]) == 4
    row = body["rows"][0]
    assert {"uid", "createdAt", "updatedAt", "claimedAt", "claimed", "imageUrl"} <= row.keys()


async def test_list_cards_paging_clamped(client, admin_headers):
    await client.post("/api/admin/create-uids", json={"count": 3}, headers=admin_headers)

    res = await client.get(
        "/api/admin/cards", params={"take": 0, "skip": -5}, headers=admin_headers,
    )
    body = res.json()
    assert body["take"] == 1
    assert body["skip"] == 0
    assert len(body["rows"]) == 1
    assert body["total"] == 3

    res = await client.get(
        "/api/admin/cards", params={"take": 10_000}, headers=admin_headers,
    )
    assert res.json()["take"] == 500


async def test_override_profile_keeps_claim_state(client, blank_card, fetch_card, admin_headers):
    res = await client.put(
        f"/api/admin/cards/{blank_card.uid}",
        json={"profile": {"name": "Set By Admin"}},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json() == {"ok": True}

    card = await fetch_card(blank_card.uid)
    assert card.name == "Set By Admin"
    assert card.claimed_at is None

    lookup = (await client.get(f"/api/card/{blank_card.uid}")).json()
    assert lookup["claimed"] is False


async def test_override_unknown_card(client, admin_headers):
    res = await client.put(
        "/api/admin/cards/missing001", json={"profile": {}}, headers=admin_headers,
    )
    assert res.status_code == 404
