import itertools

import pytest

from partnerhub.matching.models import MatchProfile
from partnerhub.matching.scorer import (
    calculate_compatibility,
    overlap_ratio,
    round_half_up,
    score_breakdown,
)


def profile(user_id="u", **kwargs):
    defaults = {
        "preferred_partner_type": "p2p",
        "support_style": ["daily_checkin"],
        "available_categories": ["finance"],
        "time_commitment": "daily",
        "experience_level": "beginner",
    }
    defaults.update(kwargs)
    return MatchProfile(user_id=user_id, **defaults)


def test_identical_preferences_score_100():
    a = profile("a", support_style=["daily_checkin", "weekly_review"], available_categories=["finance", "career"])
    b = profile("b", support_style=["weekly_review", "daily_checkin"], available_categories=["career", "finance"])

    assert calculate_compatibility(a, b) == 100


def test_partial_category_overlap_rounds_half_up():
    a = profile("a")
    b = profile(
        "b",
        preferred_partner_type="either",
        available_categories=["finance", "career"],
    )

    breakdown = score_breakdown(a, b)
    assert breakdown.categories == 12.5
    assert breakdown.total == 87.5
    assert calculate_compatibility(a, b) == 88


def test_fully_mismatched_pair_keeps_only_two_tier_experience_points():
    a = profile("a", available_categories=["finance"], support_style=["daily_checkin"])
    b = profile(
        "b",
        preferred_partner_type="premium_expert",
        time_commitment="weekly",
        experience_level="advanced",
        available_categories=["career"],
        support_style=["weekly_review"],
    )

    breakdown = score_breakdown(a, b)
    assert breakdown.partner_type == 0
    assert breakdown.time_commitment == 0
    assert breakdown.categories == 0
    assert breakdown.support_style == 0
    assert breakdown.experience == 3
    assert calculate_compatibility(a, b) == 3


def test_either_and_flexible_give_full_credit():
    a = profile("a", preferred_partner_type="either", time_commitment="flexible")
    b = profile("b", preferred_partner_type="premium_expert", time_commitment="weekly")

    breakdown = score_breakdown(a, b)
    assert breakdown.partner_type == 25
    assert breakdown.time_commitment == 20


def test_empty_category_list_earns_nothing():
    a = profile("a", available_categories=[])
    b = profile("b", available_categories=["finance"])

    assert score_breakdown(a, b).categories == 0
    assert overlap_ratio([], []) == 0.0


@pytest.mark.parametrize(
    "level_a,level_b,points",
    [
        ("beginner", "beginner", 10),
        ("beginner", "intermediate", 7),
        ("intermediate", "advanced", 7),
        ("beginner", "advanced", 3),
    ],
)
def test_experience_points_by_distance(level_a, level_b, points):
    a = profile("a", experience_level=level_a)
    b = profile("b", experience_level=level_b)

    assert score_breakdown(a, b).experience == points


def test_score_is_symmetric_and_bounded():
    profiles = [
        profile("a"),
        profile("b", preferred_partner_type="either", available_categories=["finance", "career", "health"]),
        profile("c", time_commitment="weekly", experience_level="advanced", support_style=[]),
        profile("d", preferred_partner_type="premium_expert", available_categories=["career"],
                support_style=["daily_checkin", "accountability_call", "weekly_review"]),
        profile("e", time_commitment="flexible", experience_level="intermediate"),
    ]

    for a, b in itertools.combinations(profiles, 2):
        score = calculate_compatibility(a, b)
        assert 0 <= score <= 100
        assert score == calculate_compatibility(b, a)


@pytest.mark.parametrize(
    "value,expected",
    [(87.5, 88), (86.5, 87), (59.25, 59), (0.5, 1), (100.0, 100), (2 / 3 * 100, 67)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected
