"""
Matching data models.

MatchProfile is the common shape the scorer works on. Both stored
preferences and expert profiles are converted into it, so an expert can go
through the same partnership path as a peer.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from partnerhub.infra.db.models.expert import ExpertProfile
from partnerhub.infra.db.models.preferences import (
    ExperienceLevel,
    PartnershipPreferences,
    PartnerType,
    TimeCommitment,
)


# Years of experience at which an expert counts as advanced / intermediate
ADVANCED_YEARS = 10
INTERMEDIATE_YEARS = 5


def experience_from_years(years: int) -> str:
    """Map an expert's years of experience onto the ordinal experience scale."""
    if years >= ADVANCED_YEARS:
        return ExperienceLevel.ADVANCED.value
    if years >= INTERMEDIATE_YEARS:
        return ExperienceLevel.INTERMEDIATE.value
    return ExperienceLevel.BEGINNER.value


@dataclass
class MatchProfile:
    """
    Preferences of one matchable user.
    
    Attributes:
        user_id: Owner of the preferences
        preferred_partner_type: p2p, premium_expert or either
        support_style: Support styles the user wants
        available_categories: Categories the user wants accountability for
        time_commitment: daily, weekly or flexible
        experience_level: beginner, intermediate or advanced
        goal_categories: Categories used to route the user to experts
        is_available_for_matching: Availability flag at read time
        is_expert: True when built from an ExpertProfile
    """
    user_id: str
    preferred_partner_type: str
    support_style: List[str] = field(default_factory=list)
    available_categories: List[str] = field(default_factory=list)
    time_commitment: str = TimeCommitment.FLEXIBLE.value
    experience_level: str = ExperienceLevel.BEGINNER.value
    goal_categories: List[str] = field(default_factory=list)
    is_available_for_matching: bool = True
    timezone: Optional[str] = None
    bio: Optional[str] = None
    is_expert: bool = False
    
    @classmethod
    def from_preferences(cls, prefs: PartnershipPreferences) -> "MatchProfile":
        return cls(
            user_id=prefs.user_id,
            preferred_partner_type=prefs.preferred_partner_type,
            support_style=list(prefs.support_style or []),
            available_categories=list(prefs.available_categories or []),
            time_commitment=prefs.time_commitment,
            experience_level=prefs.experience_level,
            goal_categories=list(prefs.goal_categories or []),
            is_available_for_matching=bool(prefs.is_available_for_matching),
            timezone=prefs.timezone,
            bio=prefs.bio,
        )
    
    @classmethod
    def from_expert(cls, expert: ExpertProfile) -> "MatchProfile":
        """Synthetic preferences for an expert: premium, flexible, years-derived level."""
        return cls(
            user_id=expert.user_id,
            preferred_partner_type=PartnerType.PREMIUM_EXPERT.value,
            support_style=[],
            available_categories=list(expert.expertise_areas or []),
            time_commitment=TimeCommitment.FLEXIBLE.value,
            experience_level=experience_from_years(expert.years_of_experience or 0),
            goal_categories=list(expert.expertise_areas or []),
            is_available_for_matching=bool(expert.is_available_for_matching),
            timezone=(expert.availability or {}).get("timezone") or None,
            bio=expert.bio,
            is_expert=True,
        )
    
    def snapshot(self) -> dict:
        """The part of the profile recorded on a partnership at match time."""
        return {
            "support_style": list(self.support_style),
            "categories": list(self.available_categories),
            "time_commitment": self.time_commitment,
        }


@dataclass
class MatchingCriteria:
    """Filter used by PartnerFinder.find_candidates."""
    preferred_partner_type: str
    support_style: List[str]
    categories: List[str]
    time_commitment: Optional[str] = None
    experience_level: Optional[str] = None
    timezone: Optional[str] = None
    
    @classmethod
    def from_profile(cls, profile: MatchProfile) -> "MatchingCriteria":
        return cls(
            preferred_partner_type=profile.preferred_partner_type,
            support_style=list(profile.support_style),
            categories=list(profile.available_categories),
            time_commitment=profile.time_commitment,
            experience_level=profile.experience_level,
            timezone=profile.timezone,
        )


@dataclass
class ScoreBreakdown:
    """Points earned per dimension; total is the unrounded sum."""
    partner_type: float
    time_commitment: float
    categories: float
    support_style: float
    experience: float
    
    @property
    def total(self) -> float:
        return (
            self.partner_type
            + self.time_commitment
            + self.categories
            + self.support_style
            + self.experience
        )


@dataclass
class ScoredCandidate:
    """A candidate profile with its compatibility score against a requester."""
    profile: MatchProfile
    score: int
