import pytest

from partnerhub.infra.db.repositories.expert import ExpertRepository
from partnerhub.services.errors import ErrorCode
from partnerhub.services.matching import MatchingService
from partnerhub.services.preferences import PreferenceStore


@pytest.fixture
def service(session, settings):
    return MatchingService(session, settings=settings)


@pytest.mark.asyncio
async def test_peer_match_creates_active_partnership(service, make_preferences):
    await make_preferences("alice", available_categories=["finance"])
    await make_preferences(
        "bob",
        preferred_partner_type="either",
        available_categories=["finance", "career"],
    )

    result = await service.find_and_create_partnership("alice")

    assert result.success, result.message
    assert result.data.user1_id == "alice"
    assert result.data.user2_id == "bob"
    assert result.data.status == "active"
    assert result.data.partnership_type == "p2p"
    assert "Compatibility: 88%" in result.message


@pytest.mark.asyncio
async def test_existing_partnership_is_checked_first(service, session, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")
    await service.find_and_create_partnership("alice")
    # Even with preferences gone the partnership check wins
    await PreferenceStore(session).repo.delete((await PreferenceStore(session).get("alice")).id)

    result = await service.find_and_create_partnership("alice")

    assert result.error_code == ErrorCode.ALREADY_PARTNERED


@pytest.mark.asyncio
async def test_missing_preferences(service):
    result = await service.find_and_create_partnership("ghost")

    assert result.error_code == ErrorCode.NO_PREFERENCES


@pytest.mark.asyncio
async def test_unavailable_user(service, session, make_preferences):
    await make_preferences("alice")
    await PreferenceStore(session).set_availability("alice", False)

    result = await service.find_and_create_partnership("alice")

    assert result.error_code == ErrorCode.NOT_AVAILABLE


@pytest.mark.asyncio
async def test_no_candidate_above_threshold(service, make_preferences):
    await make_preferences("alice", available_categories=["fitness"])
    await make_preferences("bob", available_categories=["career"])

    result = await service.find_and_create_partnership("alice")

    assert not result.success
    assert result.error_code == ErrorCode.NO_MATCHES


@pytest.mark.asyncio
async def test_goal_categories_route_to_expert(service, session, make_preferences, make_expert):
    await make_preferences("alice", goal_categories=["fitness"])
    await make_preferences("bob")
    await make_expert("coach", ["fitness"], rating=4.9)

    result = await service.find_and_create_partnership("alice")

    assert result.success
    assert result.data.user2_id == "coach"
    assert result.data.partnership_type == "premium_expert"
    assert "premium expert" in result.message
    assert (await ExpertRepository(session).get_by_user("coach")).total_clients_helped == 1


@pytest.mark.asyncio
async def test_expert_route_falls_back_to_peer(service, make_preferences, make_expert):
    await make_preferences("alice", goal_categories=["fitness"])
    await make_preferences("bob")
    await make_expert("coach", ["fitness"], clients=5, max_clients=5)

    result = await service.find_and_create_partnership("alice")

    assert result.success
    assert result.data.user2_id == "bob"
    assert result.data.partnership_type == "p2p"


@pytest.mark.asyncio
async def test_expert_can_take_several_clients(service, make_preferences, make_expert):
    await make_preferences("alice", goal_categories=["fitness"])
    await make_preferences("dave", goal_categories=["fitness"])
    await make_expert("coach", ["fitness"], max_clients=2)

    first = await service.find_and_create_partnership("alice")
    second = await service.find_and_create_partnership("dave")

    assert first.data.user2_id == "coach"
    assert second.data.user2_id == "coach"


@pytest.mark.asyncio
async def test_search_and_insights(service, make_preferences):
    await make_preferences("alice")
    await make_preferences("bob")

    ranked = await service.search("alice")
    assert [c.profile.user_id for c in ranked] == ["bob"]

    partnership = (await service.find_and_create_partnership("alice")).data
    insights = await service.insights(partnership.id)
    assert insights.compatibility == 100
