import pytest

from partnerhub.services.preferences import PreferenceStore


@pytest.mark.asyncio
async def test_upsert_creates_available_record(session):
    store = PreferenceStore(session)

    prefs = await store.upsert("alice", {"available_categories": ["fitness"], "time_commitment": "daily"})

    assert prefs.user_id == "alice"
    assert prefs.is_available_for_matching is True
    assert prefs.available_categories == ["fitness"]
    assert prefs.last_active_at is not None


@pytest.mark.asyncio
async def test_upsert_updates_in_place_and_ignores_managed_fields(session):
    store = PreferenceStore(session)
    created = await store.upsert("alice", {"available_categories": ["fitness"]})
    await store.set_availability("alice", False)

    updated = await store.upsert(
        "alice",
        {"available_categories": ["career"], "is_available_for_matching": True, "user_id": "mallory"},
    )

    assert updated.id == created.id
    assert updated.user_id == "alice"
    assert updated.available_categories == ["career"]
    assert updated.is_available_for_matching is False


@pytest.mark.asyncio
async def test_get_returns_none_when_never_saved(session):
    assert await PreferenceStore(session).get("ghost") is None


@pytest.mark.asyncio
async def test_set_availability_reports_missing_record(session):
    store = PreferenceStore(session)
    await store.upsert("alice", {})

    assert await store.set_availability("alice", False) is True
    assert (await store.get("alice")).is_available_for_matching is False
    assert await store.set_availability("ghost", True) is False


@pytest.mark.asyncio
async def test_claim_succeeds_once(session):
    store = PreferenceStore(session)
    await store.upsert("alice", {})

    assert await store.claim_for_matching("alice") is True
    assert await store.claim_for_matching("alice") is False
    assert (await store.get("alice")).is_available_for_matching is False
