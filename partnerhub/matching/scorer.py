"""
Compatibility scoring between two users' matching preferences.

Five independently normalised dimensions, weighted to a 100 point maximum:

    partner type      25   equal, or either side is "either"
    time commitment   20   equal, or either side is "flexible"
    categories        25   |A & B| / max(|A|, |B|)
    support style     20   |A & B| / max(|A|, |B|)
    experience        10   same level 10, adjacent 7, two apart 3

The result is rounded half-up. Every dimension is symmetric, so
calculate_compatibility(a, b) == calculate_compatibility(b, a).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from partnerhub.infra.db.models.preferences import ExperienceLevel, PartnerType, TimeCommitment

from .models import MatchProfile, ScoreBreakdown


PARTNER_TYPE_WEIGHT = 25
TIME_COMMITMENT_WEIGHT = 20
CATEGORY_WEIGHT = 25
SUPPORT_STYLE_WEIGHT = 20
EXPERIENCE_WEIGHT = 10

# Points by distance on the experience scale
EXPERIENCE_POINTS = {0: 10, 1: 7, 2: 3}

EXPERIENCE_ORDER = [
    ExperienceLevel.BEGINNER.value,
    ExperienceLevel.INTERMEDIATE.value,
    ExperienceLevel.ADVANCED.value,
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (87.5 -> 88)."""
    # Trim float noise first so 87.49999999 from a ratio still lands on 88
    return int(Decimal(repr(round(value, 9))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def overlap_ratio(a: Iterable[str], b: Iterable[str]) -> float:
    """Shared items over the larger set; 0.0 when either side is empty."""
    set_a, set_b = set(a or []), set(b or [])
    if not set_a or not set_b:
        return 0.0
    return len(set_a & set_b) / max(len(set_a), len(set_b))


def _experience_distance(level_a: str, level_b: str) -> int:
    try:
        return abs(EXPERIENCE_ORDER.index(level_a) - EXPERIENCE_ORDER.index(level_b))
    except ValueError:
        # Unknown level: treat as furthest apart
        return len(EXPERIENCE_ORDER) - 1


def score_breakdown(a: MatchProfile, b: MatchProfile) -> ScoreBreakdown:
    """Points earned by a pair on each dimension."""
    either = PartnerType.EITHER.value
    if (
        a.preferred_partner_type == b.preferred_partner_type
        or a.preferred_partner_type == either
        or b.preferred_partner_type == either
    ):
        partner_type = float(PARTNER_TYPE_WEIGHT)
    else:
        partner_type = 0.0
    
    flexible = TimeCommitment.FLEXIBLE.value
    if (
        a.time_commitment == b.time_commitment
        or a.time_commitment == flexible
        or b.time_commitment == flexible
    ):
        time_commitment = float(TIME_COMMITMENT_WEIGHT)
    else:
        time_commitment = 0.0
    
    distance = _experience_distance(a.experience_level, b.experience_level)
    
    return ScoreBreakdown(
        partner_type=partner_type,
        time_commitment=time_commitment,
        categories=overlap_ratio(a.available_categories, b.available_categories) * CATEGORY_WEIGHT,
        support_style=overlap_ratio(a.support_style, b.support_style) * SUPPORT_STYLE_WEIGHT,
        experience=float(EXPERIENCE_POINTS.get(distance, EXPERIENCE_POINTS[2])),
    )


def calculate_compatibility(a: MatchProfile, b: MatchProfile) -> int:
    """
    Compatibility score in [0, 100].
    
    Args:
        a: First profile (usually the requester)
        b: Second profile (usually the candidate)
        
    Returns:
        Integer score, rounded half-up
    """
    return round_half_up(score_breakdown(a, b).total)
