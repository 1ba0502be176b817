import pytest

from partnerhub.infra.db.models.expert import ExpertProfile
from partnerhub.infra.db.repositories.expert import ExpertRepository
from partnerhub.matching.experts import ExpertMatcher, rank_experts
from partnerhub.matching.models import MatchProfile, experience_from_years


def expert(user_id, rating, years, clients=0, max_clients=5, available=True):
    return ExpertProfile(
        user_id=user_id,
        expertise_areas=["fitness"],
        years_of_experience=years,
        availability={"time_slots": [], "timezone": "", "max_clients": max_clients},
        is_available_for_matching=available,
        rating=rating,
        total_clients_helped=clients,
    )


def requester(*goal_categories):
    return MatchProfile(user_id="seeker", preferred_partner_type="either", goal_categories=list(goal_categories))


@pytest.mark.parametrize(
    "years,level",
    [(0, "beginner"), (4, "beginner"), (5, "intermediate"), (9, "intermediate"), (10, "advanced"), (25, "advanced")],
)
def test_experience_from_years(years, level):
    assert experience_from_years(years) == level


def test_rank_experts_by_rating_then_years_and_drops_full_ones():
    ranked = rank_experts([
        expert("veteran", rating=4.5, years=20),
        expert("star", rating=4.9, years=3),
        expert("junior", rating=4.5, years=2),
        expert("full", rating=5.0, years=30, clients=5, max_clients=5),
        expert("away", rating=5.0, years=30, available=False),
    ])

    assert [e.user_id for e in ranked] == ["star", "veteran", "junior"]


@pytest.mark.asyncio
async def test_expert_match_maps_to_synthetic_profile(session, make_expert):
    await make_expert("coach", ["fitness"], rating=4.8, years=7)

    match = await ExpertMatcher(ExpertRepository(session)).find_expert_match(requester("fitness"))

    assert match.user_id == "coach"
    assert match.is_expert
    assert match.preferred_partner_type == "premium_expert"
    assert match.time_commitment == "flexible"
    assert match.experience_level == "intermediate"


@pytest.mark.asyncio
async def test_first_category_with_experts_decides_even_if_all_full(session, make_expert):
    await make_expert("busy", ["fitness"], clients=5, max_clients=5)
    await make_expert("free", ["career"])

    matcher = ExpertMatcher(ExpertRepository(session))

    assert await matcher.find_expert_match(requester("fitness", "career")) is None
    assert (await matcher.find_expert_match(requester("career", "fitness"))).user_id == "free"


@pytest.mark.asyncio
async def test_categories_without_experts_are_skipped(session, make_expert):
    await make_expert("mentor", ["career"])

    match = await ExpertMatcher(ExpertRepository(session)).find_expert_match(requester("finance", "career"))

    assert match.user_id == "mentor"


@pytest.mark.asyncio
async def test_no_goal_categories_means_no_expert(session, make_expert):
    await make_expert("mentor", ["career"])

    assert await ExpertMatcher(ExpertRepository(session)).find_expert_match(requester()) is None
