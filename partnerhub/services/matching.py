"""
Matching orchestration: expert routing, peer best match, partnership creation.
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.config import Settings, get_settings
from partnerhub.infra.db.models.partnership import Partnership, PartnershipType
from partnerhub.infra.db.repositories.expert import ExpertRepository
from partnerhub.infra.db.repositories.partnership import PartnershipRepository
from partnerhub.infra.db.repositories.preferences import PreferencesRepository
from partnerhub.matching.experts import ExpertMatcher
from partnerhub.matching.finder import PartnerFinder, PartnershipInsights, SearchFilters
from partnerhub.matching.models import MatchProfile, ScoredCandidate
from partnerhub.matching.scorer import calculate_compatibility

from .errors import ErrorCode, PreconditionError, wraps_store_errors
from .notifications import NotificationDispatcher
from .partnerships import PartnershipService
from .results import OperationResult, guarded_operation

logger = logging.getLogger(__name__)


class MatchingService:
    """Entry point for "find me a partner"."""

    def __init__(
        self,
        session: AsyncSession,
        settings: Optional[Settings] = None,
        notifier: Optional[NotificationDispatcher] = None,
    ):
        settings = settings or get_settings()
        self.session = session
        self.finder = PartnerFinder(
            PreferencesRepository(session),
            PartnershipRepository(session),
            best_match_threshold=settings.best_match_threshold,
        )
        self.expert_matcher = ExpertMatcher(ExpertRepository(session))
        self.partnerships = PartnershipService(session, notifier=notifier, settings=settings)

    @guarded_operation("find and create partnership")
    async def find_and_create_partnership(self, user_id: str) -> OperationResult[Partnership]:
        """
        Match a user and create an auto-approved partnership.

        Checks run in order: existing partnership, preferences, availability.
        Users with goal categories are offered an expert first; otherwise,
        or when no expert fits, the best peer above the threshold is used.
        """
        if await self.partnerships.get_for_user(user_id) is not None:
            raise PreconditionError(ErrorCode.ALREADY_PARTNERED, "You already have an active partnership")

        prefs = await self.partnerships.preferences.get(user_id)
        if prefs is None:
            raise PreconditionError(
                ErrorCode.NO_PREFERENCES,
                "Please set up your partnership preferences first",
            )
        if not prefs.is_available_for_matching:
            raise PreconditionError(ErrorCode.NOT_AVAILABLE, "You are not available for matching")

        requester = MatchProfile.from_preferences(prefs)
        partnership_type = PartnershipType.P2P.value
        match: Optional[ScoredCandidate] = None

        if requester.goal_categories:
            expert = await self.expert_matcher.find_expert_match(requester)
            if expert is not None:
                match = ScoredCandidate(profile=expert, score=calculate_compatibility(requester, expert))
                partnership_type = PartnershipType.PREMIUM_EXPERT.value

        if match is None:
            match = await self.finder.find_best_match(user_id)
        if match is None:
            raise PreconditionError(
                ErrorCode.NO_MATCHES,
                "No compatible partners found at this time. Try adjusting your preferences.",
            )

        result = await self.partnerships.request(
            user_id,
            match.profile.user_id,
            partnership_type,
            auto_approved=True,
            matching_preferences=requester.snapshot(),
        )
        if not result.success:
            logger.warning(f"Partnership creation for {user_id} failed: {result.message}")
            return OperationResult(
                success=False,
                message=f"Failed to create partnership: {result.message}",
                error_code=ErrorCode.CREATION_FAILED,
            )

        logger.info(
            f"Matched {user_id} with {match.profile.user_id} "
            f"({partnership_type}, score={match.score})"
        )
        return OperationResult.ok(
            result.data,
            f"Successfully matched with a {'premium expert' if match.profile.is_expert else 'partner'}! "
            f"Compatibility: {match.score}%",
        )

    @wraps_store_errors("search partners")
    async def search(self, user_id: str, filters: Optional[SearchFilters] = None) -> List[ScoredCandidate]:
        return await self.finder.search(user_id, filters)

    @wraps_store_errors("load partnership insights")
    async def insights(self, partnership_id: str) -> Optional[PartnershipInsights]:
        return await self.finder.insights(partnership_id)
