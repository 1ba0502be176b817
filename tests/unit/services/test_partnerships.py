import pytest
from sqlalchemy.exc import OperationalError

from partnerhub.infra.db.repositories.expert import ExpertRepository
from partnerhub.services.errors import ErrorCode
from partnerhub.services.notifications import NotificationDispatcher, NotificationOutbox
from partnerhub.services.partnerships import PartnershipService
from partnerhub.services.preferences import PreferenceStore


@pytest.fixture
def service(session, settings):
    return PartnershipService(session, settings=settings)


async def is_available(session, user_id):
    return (await PreferenceStore(session).get(user_id)).is_available_for_matching


@pytest.mark.asyncio
async def test_create_claims_both_users_and_blocks_new_requests(service, session, make_preferences):
    for user in ("alice", "bob", "carol"):
        await make_preferences(user)

    result = await service.create("alice", "bob", "p2p", {"categories": ["fitness"]}, auto_approved=True)

    assert result.success
    partnership = result.data
    assert partnership.status == "active"
    assert partnership.started_at is not None
    assert partnership.metrics["total_shared_goals"] == 0
    assert partnership.matching_preferences == {"categories": ["fitness"]}
    assert not await is_available(session, "alice")
    assert not await is_available(session, "bob")
    assert (await service.get_for_user("alice")).id == partnership.id
    assert (await service.get_for_user("bob")).id == partnership.id

    again = await service.request("carol", "bob")
    assert not again.success
    assert again.error_code == ErrorCode.ALREADY_PARTNERED


@pytest.mark.asyncio
async def test_end_restores_availability(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    partnership = (await service.create("alice", "bob", auto_approved=True)).data

    result = await service.end(partnership.id, "bob", reason="moved on")

    assert result.success
    assert result.data.status == "ended"
    assert result.data.ended_at is not None
    assert result.data.end_reason == "moved on"
    assert await is_available(session, "alice")
    assert await is_available(session, "bob")
    assert await service.get_for_user("alice") is None

    assert (await service.request("alice", "bob")).success


@pytest.mark.asyncio
async def test_request_requires_both_users_available(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    await PreferenceStore(session).set_availability("bob", False)

    result = await service.request("alice", "bob")

    assert result.error_code == ErrorCode.NOT_AVAILABLE
    assert await service.get_for_user("alice") is None


@pytest.mark.asyncio
async def test_request_with_self_is_rejected(service, make_preferences):
    await make_preferences("alice")

    result = await service.request("alice", "alice")

    assert not result.success
    assert result.error_code == ErrorCode.NOT_AVAILABLE


@pytest.mark.asyncio
async def test_pending_request_flow(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")

    pending = (await service.request("alice", "bob")).data
    assert pending.status == "pending"
    assert pending.started_at is None
    # Out of the pool while the request is outstanding
    assert not await is_available(session, "bob")

    accepted = await service.accept(pending.id, "bob")
    assert accepted.success
    assert accepted.data.status == "active"
    assert accepted.data.started_at is not None


@pytest.mark.asyncio
async def test_decline_ends_pending_partnership(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    pending = (await service.request("alice", "bob")).data

    result = await service.decline(pending.id, "bob")

    assert result.data.status == "ended"
    assert await is_available(session, "alice")
    assert await is_available(session, "bob")


@pytest.mark.asyncio
async def test_pause_and_resume(service, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    partnership = (await service.create("alice", "bob", auto_approved=True)).data

    paused = await service.pause(partnership.id, "alice")
    assert paused.data.status == "paused"
    assert await service.get_for_user("alice") is None

    resumed = await service.resume(partnership.id, "bob")
    assert resumed.data.status == "active"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "action,auto_approved",
    [("accept", True), ("decline", True), ("resume", True), ("pause", False)],
)
async def test_invalid_transitions_are_rejected(service, make_preferences, action, auto_approved):
    await make_preferences("alice")
    await make_preferences("bob")
    partnership = (await service.create("alice", "bob", auto_approved=auto_approved)).data

    result = await getattr(service, action)(partnership.id, "bob")

    assert not result.success
    assert result.error_code == ErrorCode.INVALID_TRANSITION


@pytest.mark.asyncio
async def test_ended_partnership_cannot_end_again(service, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    partnership = (await service.create("alice", "bob", auto_approved=True)).data
    await service.end(partnership.id, "alice")

    result = await service.end(partnership.id, "alice")

    assert result.error_code == ErrorCode.INVALID_TRANSITION


@pytest.mark.asyncio
async def test_only_members_can_transition(service, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    partnership = (await service.create("alice", "bob", auto_approved=True)).data

    result = await service.end(partnership.id, "mallory")

    assert result.error_code == ErrorCode.NOT_AUTHORIZED
    assert (await service.get(partnership.id)).status == "active"
    assert (await service.accept("missing", "alice")).error_code == ErrorCode.NOT_FOUND


@pytest.mark.asyncio
async def test_lost_claim_releases_the_first_user(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    # A concurrent match already took bob
    assert await PreferenceStore(session).claim_for_matching("bob")

    result = await service.create("alice", "bob", auto_approved=True)

    assert result.error_code == ErrorCode.NOT_AVAILABLE
    assert await is_available(session, "alice")
    assert await service.get_for_user("alice") is None


@pytest.mark.asyncio
async def test_notification_failure_does_not_block_creation(session, settings, make_preferences):
    class BrokenRepo:
        async def add(self, **kwargs):
            raise RuntimeError("push channel down")

    notifier = NotificationDispatcher(session)
    notifier.repo = BrokenRepo()
    service = PartnershipService(session, notifier=notifier, settings=settings)
    await make_preferences("alice")
    await make_preferences("bob")

    result = await service.create("alice", "bob", auto_approved=True)

    assert result.success
    assert (await service.get_for_user("bob")).id == result.data.id


@pytest.mark.asyncio
async def test_request_notifies_the_invited_user(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")

    partnership = (await service.request("alice", "bob")).data

    inbox = await NotificationOutbox(session).list_for_user("bob")
    assert [n.type for n in inbox] == ["partnership_request"]
    assert inbox[0].partnership_id == partnership.id


@pytest.mark.asyncio
async def test_request_specific_enforces_minimum_compatibility(service, make_preferences):
    await make_preferences("alice", available_categories=["fitness"], support_style=["daily_checkin"])
    await make_preferences(
        "bob",
        preferred_partner_type="premium_expert",
        time_commitment="weekly",
        available_categories=["career"],
        support_style=["weekly_review"],
    )
    await make_preferences("carol")

    low = await service.request_specific("alice", "bob")
    assert low.error_code == ErrorCode.LOW_COMPATIBILITY

    ok = await service.request_specific("alice", "carol")
    assert ok.success
    assert ok.data.status == "pending"
    assert ok.data.matching_preferences["compatibility_score"] == 100

    missing = await service.request_specific("alice", "ghost")
    assert missing.error_code == ErrorCode.NO_PREFERENCES


@pytest.mark.asyncio
async def test_expert_partnership_counts_a_client(service, session, make_preferences, make_expert):
    await make_preferences("alice")
    await make_expert("coach", ["fitness"])

    result = await service.request("alice", "coach", "premium_expert", auto_approved=True)

    assert result.success
    assert result.data.partnership_type == "premium_expert"
    assert (await ExpertRepository(session).get_by_user("coach")).total_clients_helped == 1


@pytest.mark.asyncio
async def test_list_active_only_returns_active(service, make_preferences):
    for user in ("a", "b", "c", "d"):
        await make_preferences(user)
    active = (await service.create("a", "b", auto_approved=True)).data
    await service.create("c", "d")

    assert [p.id for p in await service.list_active()] == [active.id]


@pytest.mark.asyncio
async def test_outbox_store_error_does_not_fail_transitions(session, settings, make_preferences):
    class LockedOutbox:
        async def add(self, **kwargs):
            raise OperationalError("INSERT INTO partner_notifications", {}, Exception("database is locked"))

    notifier = NotificationDispatcher(session)
    notifier.repo = LockedOutbox()
    service = PartnershipService(session, notifier=notifier, settings=settings)
    await make_preferences("alice")
    await make_preferences("bob")

    requested = await service.request("alice", "bob")
    assert requested.success, requested.message
    assert requested.data.status == "pending"

    accepted = await service.accept(requested.data.id, "bob")
    assert accepted.success, accepted.message
    assert accepted.data.status == "active"
    assert accepted.data.started_at is not None

    ended = await service.end(requested.data.id, "alice", reason="moved")
    assert ended.success, ended.message
    assert ended.data.end_reason == "moved"
    assert await is_available(session, "alice")


@pytest.mark.asyncio
async def test_unknown_partnership_type_is_a_failed_result(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")

    created = await service.create("alice", "bob", "mentorship")
    requested = await service.request("alice", "bob", "mentorship")

    for result in (created, requested):
        assert not result.success
        assert result.error_code == ErrorCode.INVALID_INPUT
        assert "mentorship" in result.message
    assert await is_available(session, "alice")
    assert await service.get_for_user("alice") is None
