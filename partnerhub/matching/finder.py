"""
Partner search and best-match selection.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from partnerhub.infra.db.repositories.partnership import PartnershipRepository
from partnerhub.infra.db.repositories.preferences import (
    PreferencesRepository,
    allowed_partner_types,
    allowed_time_commitments,
)

from .models import MatchingCriteria, MatchProfile, ScoredCandidate
from .scorer import calculate_compatibility

logger = logging.getLogger(__name__)

DEFAULT_BEST_MATCH_THRESHOLD = 60


@dataclass
class SearchFilters:
    """Optional overrides applied on top of the requester's own preferences."""
    category: Optional[str] = None
    support_style: Optional[str] = None
    time_commitment: Optional[str] = None
    partner_type: Optional[str] = None
    experience_level: Optional[str] = None


@dataclass
class PartnershipInsights:
    compatibility: int
    shared_categories: List[str] = field(default_factory=list)
    strength_areas: List[str] = field(default_factory=list)
    improvement_areas: List[str] = field(default_factory=list)


class PartnerFinder:
    """
    Finds and ranks peer candidates from the preferences store.
    
    Store errors are not caught here; the service layer wraps them.
    """
    
    def __init__(
        self,
        preferences: PreferencesRepository,
        partnerships: Optional[PartnershipRepository] = None,
        best_match_threshold: int = DEFAULT_BEST_MATCH_THRESHOLD,
    ):
        self.preferences = preferences
        self.partnerships = partnerships
        self.best_match_threshold = best_match_threshold
    
    async def find_candidates(
        self,
        criteria: Optional[MatchingCriteria] = None,
        require_available: bool = False,
    ) -> List[MatchProfile]:
        """
        Query candidate preferences.
        
        Without criteria every record is returned (browse mode). With
        criteria the store filters on partner type and time commitment, and
        candidates must share at least one category and one support style.
        """
        partner_types = None
        time_commitments = None
        if criteria is not None:
            partner_types = allowed_partner_types(criteria.preferred_partner_type)
            time_commitments = allowed_time_commitments(criteria.time_commitment)
        
        rows = await self.preferences.query(
            available_only=require_available,
            partner_types=partner_types,
            time_commitments=time_commitments,
        )
        candidates = [MatchProfile.from_preferences(row) for row in rows if row.user_id]
        
        if criteria is None:
            return candidates
        
        wanted_categories = set(criteria.categories or [])
        wanted_styles = set(criteria.support_style or [])
        return [
            c for c in candidates
            if wanted_categories.intersection(c.available_categories)
            and wanted_styles.intersection(c.support_style)
        ]
    
    def rank(self, requester: MatchProfile, candidates: List[MatchProfile]) -> List[ScoredCandidate]:
        """Score candidates against the requester, best first; ties keep store order."""
        scored = [
            ScoredCandidate(profile=c, score=calculate_compatibility(requester, c))
            for c in candidates
            if c.user_id != requester.user_id
        ]
        return sorted(scored, key=lambda s: s.score, reverse=True)
    
    async def find_best_match(self, user_id: str) -> Optional[ScoredCandidate]:
        """
        Best available partner for a user, or None.
        
        The requester must have preferences and be available. A candidate
        is returned only if it reaches best_match_threshold.
        """
        prefs = await self.preferences.get_by_user(user_id)
        if prefs is None or not prefs.is_available_for_matching:
            return None
        
        requester = MatchProfile.from_preferences(prefs)
        candidates = await self.find_candidates(
            MatchingCriteria.from_profile(requester),
            require_available=True,
        )
        ranked = self.rank(requester, candidates)
        if not ranked:
            logger.info(f"No candidates for user {user_id}")
            return None
        
        best = ranked[0]
        if best.score < self.best_match_threshold:
            logger.info(
                f"Best candidate for user {user_id} scored {best.score}, "
                f"below threshold {self.best_match_threshold}"
            )
            return None
        return best
    
    async def search(self, user_id: str, filters: Optional[SearchFilters] = None) -> List[ScoredCandidate]:
        """Manual browse: candidates matching the user's preferences plus overrides."""
        prefs = await self.preferences.get_by_user(user_id)
        if prefs is None:
            return []
        
        requester = MatchProfile.from_preferences(prefs)
        filters = filters or SearchFilters()
        criteria = MatchingCriteria(
            preferred_partner_type=filters.partner_type or requester.preferred_partner_type,
            support_style=[filters.support_style] if filters.support_style else requester.support_style,
            categories=[filters.category] if filters.category else requester.available_categories,
            time_commitment=filters.time_commitment or requester.time_commitment,
            experience_level=filters.experience_level or requester.experience_level,
            timezone=requester.timezone,
        )
        candidates = await self.find_candidates(criteria)
        return self.rank(requester, candidates)
    
    async def insights(self, partnership_id: str) -> Optional[PartnershipInsights]:
        """Compatibility summary for the two members of a partnership."""
        if self.partnerships is None:
            raise RuntimeError("PartnerFinder.insights needs a PartnershipRepository")
        
        partnership = await self.partnerships.get_by_id(partnership_id)
        if partnership is None:
            return None
        
        prefs_1 = await self.preferences.get_by_user(partnership.user1_id)
        prefs_2 = await self.preferences.get_by_user(partnership.user2_id)
        if prefs_1 is None or prefs_2 is None:
            return None
        
        a = MatchProfile.from_preferences(prefs_1)
        b = MatchProfile.from_preferences(prefs_2)
        
        insights = PartnershipInsights(
            compatibility=calculate_compatibility(a, b),
            shared_categories=[c for c in a.available_categories if c in b.available_categories],
        )
        
        if a.time_commitment == b.time_commitment:
            insights.strength_areas.append("Time commitment alignment")
        else:
            insights.improvement_areas.append("Different time commitments")
        
        if a.experience_level == b.experience_level:
            insights.strength_areas.append("Similar experience levels")
        
        common_styles = [s for s in a.support_style if s in b.support_style]
        if common_styles:
            insights.strength_areas.append(f"Shared support styles: {', '.join(common_styles)}")
        else:
            insights.improvement_areas.append("No shared support styles")
        
        return insights
