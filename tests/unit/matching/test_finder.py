import pytest

from partnerhub.infra.db.repositories.partnership import PartnershipRepository
from partnerhub.infra.db.repositories.preferences import PreferencesRepository
from partnerhub.matching.finder import PartnerFinder, SearchFilters
from partnerhub.matching.models import MatchingCriteria, MatchProfile, ScoredCandidate


@pytest.fixture
def finder(session):
    return PartnerFinder(PreferencesRepository(session), PartnershipRepository(session))


@pytest.mark.asyncio
async def test_best_match_picks_highest_score_and_never_the_requester(finder, make_preferences):
    await make_preferences("alice", available_categories=["finance"])
    await make_preferences("bob", available_categories=["finance", "career"], preferred_partner_type="either")
    await make_preferences("carol", available_categories=["finance"])

    best = await finder.find_best_match("alice")

    assert best is not None
    assert best.profile.user_id == "carol"
    assert best.score == 100


@pytest.mark.asyncio
async def test_best_match_below_threshold_returns_none(finder, make_preferences):
    await make_preferences(
        "alice",
        available_categories=["a", "b", "c", "d"],
        support_style=["w", "x", "y", "z"],
    )
    # Shares one of four categories and styles, two experience tiers apart: 59.25
    await make_preferences(
        "bob",
        available_categories=["a", "e", "f", "g"],
        support_style=["w", "q", "r", "s"],
        experience_level="advanced",
    )

    candidates = await finder.find_candidates(
        MatchingCriteria.from_profile(MatchProfile.from_preferences(
            await finder.preferences.get_by_user("alice")
        )),
        require_available=True,
    )
    assert sorted(c.user_id for c in candidates) == ["alice", "bob"]
    assert await finder.find_best_match("alice") is None


@pytest.mark.asyncio
async def test_best_match_skips_unavailable_users(finder, make_preferences, session):
    await make_preferences("alice")
    await make_preferences("bob")
    await PreferencesRepository(session).set_availability("bob", False)

    assert await finder.find_best_match("alice") is None


@pytest.mark.asyncio
async def test_unavailable_requester_gets_no_match(finder, make_preferences, session):
    await make_preferences("alice")
    await make_preferences("bob")
    await PreferencesRepository(session).set_availability("alice", False)

    assert await finder.find_best_match("alice") is None
    assert await finder.find_best_match("nobody") is None


@pytest.mark.asyncio
async def test_candidates_filtered_by_commitment_type_and_overlap(finder, make_preferences):
    await make_preferences("daily", time_commitment="daily")
    await make_preferences("flex", time_commitment="flexible")
    await make_preferences("weekly", time_commitment="weekly")
    await make_preferences("expert_only", preferred_partner_type="premium_expert")
    await make_preferences("no_style", support_style=["weekly_review"])
    await make_preferences("no_category", available_categories=["career"])

    criteria = MatchingCriteria(
        preferred_partner_type="p2p",
        support_style=["daily_checkin"],
        categories=["fitness"],
        time_commitment="daily",
    )
    found = await finder.find_candidates(criteria)

    assert sorted(c.user_id for c in found) == ["daily", "flex"]


@pytest.mark.asyncio
async def test_flexible_requester_sees_every_commitment(finder, make_preferences):
    await make_preferences("daily", time_commitment="daily")
    await make_preferences("weekly", time_commitment="weekly")

    criteria = MatchingCriteria(
        preferred_partner_type="either",
        support_style=["daily_checkin"],
        categories=["fitness"],
        time_commitment="flexible",
    )
    found = await finder.find_candidates(criteria)

    assert sorted(c.user_id for c in found) == ["daily", "weekly"]


@pytest.mark.asyncio
async def test_browse_without_criteria_returns_everyone(finder, make_preferences):
    await make_preferences("a")
    await make_preferences("b", available_categories=["career"], time_commitment="weekly")

    found = await finder.find_candidates()

    assert sorted(c.user_id for c in found) == ["a", "b"]


def test_rank_keeps_store_order_on_ties(session):
    finder = PartnerFinder(PreferencesRepository(session))
    requester = MatchProfile(user_id="me", preferred_partner_type="p2p", available_categories=["x"], support_style=["s"])
    first = MatchProfile(user_id="first", preferred_partner_type="p2p", available_categories=["x"], support_style=["s"])
    second = MatchProfile(user_id="second", preferred_partner_type="p2p", available_categories=["x"], support_style=["s"])

    ranked = finder.rank(requester, [first, requester, second])

    assert [r.profile.user_id for r in ranked] == ["first", "second"]
    assert all(isinstance(r, ScoredCandidate) for r in ranked)


@pytest.mark.asyncio
async def test_search_applies_category_override(finder, make_preferences):
    await make_preferences("alice", available_categories=["fitness"])
    await make_preferences("bob", available_categories=["career"])
    await make_preferences("carol", available_categories=["fitness"])

    results = await finder.search("alice", SearchFilters(category="career"))

    assert [r.profile.user_id for r in results] == ["bob"]


@pytest.mark.asyncio
async def test_insights_lists_strengths_and_gaps(finder, make_preferences, session):
    await make_preferences("alice", available_categories=["fitness", "career"])
    await make_preferences("bob", available_categories=["fitness"], time_commitment="weekly")
    partnership = await PartnershipRepository(session).create(user1_id="alice", user2_id="bob")

    insights = await finder.insights(partnership.id)

    assert insights.shared_categories == ["fitness"]
    assert "Different time commitments" in insights.improvement_areas
    assert "Similar experience levels" in insights.strength_areas
    assert "Shared support styles: daily_checkin" in insights.strength_areas
    assert await finder.insights("missing") is None
