"""
Expert routing.

Requesters with goal categories are offered the best available expert
before falling back to peer matching.
"""

import logging
from typing import List, Optional, Sequence

from partnerhub.infra.db.models.expert import ExpertProfile
from partnerhub.infra.db.repositories.expert import ExpertRepository

from .models import MatchProfile

logger = logging.getLogger(__name__)


def rank_experts(experts: Sequence[ExpertProfile]) -> List[ExpertProfile]:
    """Drop experts at capacity, then order by rating and years of experience."""
    with_capacity = [e for e in experts if e.is_available_for_matching and e.has_capacity]
    return sorted(
        with_capacity,
        key=lambda e: (e.rating or 0.0, e.years_of_experience or 0),
        reverse=True,
    )


class ExpertMatcher:
    """Finds the best expert for a requester's goal categories."""
    
    def __init__(self, experts: ExpertRepository):
        self.experts = experts
    
    async def find_expert_match(self, requester: MatchProfile) -> Optional[MatchProfile]:
        """
        Best expert for the requester, as a synthetic MatchProfile.
        
        Categories are tried in the requester's order. The first category
        with any available expert decides the candidate pool; later
        categories are not consulted even if that pool is all at capacity.
        """
        for category in requester.goal_categories:
            found = await self.experts.get_available_by_expertise(category)
            if not found:
                continue
            
            ranked = rank_experts([e for e in found if e.user_id != requester.user_id])
            if not ranked:
                logger.info(f"All experts for '{category}' are at capacity")
                return None
            
            best = ranked[0]
            logger.info(
                f"Expert {best.user_id} selected for user {requester.user_id} "
                f"(category={category}, rating={best.rating})"
            )
            return MatchProfile.from_expert(best)
        
        return None
