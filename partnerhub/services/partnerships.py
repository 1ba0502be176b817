"""
Partnership Lifecycle Manager.

Creates partnerships and moves them through the status machine:

    pending --accept--> active --pause--> paused --resume--> active
    pending --decline--> ended
    pending/active/paused --end--> ended

Creating a partnership takes both users out of the matching pool at once,
even while it is pending; ending it puts them back.
"""
import logging
from typing import Any, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.config import Settings, get_settings
from partnerhub.infra.db.base import utcnow
from partnerhub.infra.db.models.partnership import (
    Partnership,
    PartnershipStatus,
    PartnershipType,
    default_rules,
    initial_metrics,
)
from partnerhub.infra.db.repositories.expert import ExpertRepository
from partnerhub.infra.db.repositories.partnership import PartnershipRepository
from partnerhub.matching.models import MatchProfile
from partnerhub.matching.scorer import calculate_compatibility

from .errors import (
    ErrorCode,
    NotFoundError,
    PreconditionError,
    UnauthorizedError,
    parse_choice,
    wraps_store_errors,
)
from .notifications import NotificationDispatcher
from .preferences import PreferenceStore
from .results import OperationResult, guarded_operation

logger = logging.getLogger(__name__)

PENDING = PartnershipStatus.PENDING.value
ACTIVE = PartnershipStatus.ACTIVE.value
PAUSED = PartnershipStatus.PAUSED.value
ENDED = PartnershipStatus.ENDED.value

# action -> (allowed source statuses, target status)
TRANSITIONS = {
    "accept": ((PENDING,), ACTIVE),
    "decline": ((PENDING,), ENDED),
    "pause": ((ACTIVE,), PAUSED),
    "resume": ((PAUSED,), ACTIVE),
    "end": ((PENDING, ACTIVE, PAUSED), ENDED),
}


class PartnershipService:
    """Lifecycle operations on partnerships. State changes return OperationResult."""

    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.session = session
        self.partnerships = PartnershipRepository(session)
        self.preferences = PreferenceStore(session)
        self.experts = ExpertRepository(session)
        self.notifier = notifier or NotificationDispatcher(session)
        self.min_manual_compatibility = settings.manual_request_min_compatibility

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @guarded_operation("create partnership")
    async def create(
        self,
        user1_id: str,
        user2_id: str,
        partnership_type: str = PartnershipType.P2P.value,
        matching_preferences: Optional[dict[str, Any]] = None,
        auto_approved: bool = False,
    ) -> OperationResult[Partnership]:
        """
        Create a partnership and take both users out of the matching pool.

        Args:
            user1_id: Requester
            user2_id: Partner (peer or expert)
            partnership_type: p2p or premium_expert
            matching_preferences: Snapshot of the requester's preferences
            auto_approved: Start as active instead of pending

        Returns:
            OperationResult carrying the new Partnership
        """
        partnership_type = parse_choice(PartnershipType, partnership_type, "partnership type").value
        claimed = await self._claim_pair(user1_id, user2_id)

        now = utcnow()
        try:
            partnership = await self.partnerships.create(
                user1_id=user1_id,
                user2_id=user2_id,
                partnership_type=partnership_type,
                status=ACTIVE if auto_approved else PENDING,
                matched_at=now,
                started_at=now if auto_approved else None,
                matching_preferences=dict(matching_preferences or {}),
                partnership_rules=default_rules(),
                metrics=initial_metrics(now),
            )
        except SQLAlchemyError:
            await self.session.rollback()
            await self._release(claimed)
            raise

        logger.info(
            f"Partnership {partnership.id} created: {user1_id} + {user2_id} "
            f"({partnership_type}, status={partnership.status})"
        )

        if partnership_type == PartnershipType.PREMIUM_EXPERT.value:
            await self.experts.increment_clients(user2_id)

        if auto_approved:
            await self.notifier.partner_assigned(partnership.id, user1_id, user2_id)
        else:
            await self.notifier.partnership_request(partnership.id, user1_id, user2_id)

        return OperationResult.ok(partnership, "Partnership created")

    @guarded_operation("request partnership")
    async def request(
        self,
        requester_id: str,
        partner_id: str,
        partnership_type: str = PartnershipType.P2P.value,
        auto_approved: bool = False,
        matching_preferences: Optional[dict[str, Any]] = None,
    ) -> OperationResult[Partnership]:
        """Guard the single-partnership and availability rules, then create."""
        partnership_type = parse_choice(PartnershipType, partnership_type, "partnership type").value
        if requester_id == partner_id:
            raise PreconditionError(ErrorCode.NOT_AVAILABLE, "Cannot partner with yourself")

        # Experts take several clients; their limit is capacity, not one partnership
        single_partnership = [requester_id]
        if partnership_type != PartnershipType.PREMIUM_EXPERT.value:
            single_partnership.append(partner_id)
        for user_id in single_partnership:
            if await self.partnerships.get_open_for_user(user_id) is not None:
                raise PreconditionError(
                    ErrorCode.ALREADY_PARTNERED,
                    f"User {user_id} already has an active or pending partnership",
                )

        for user_id in (requester_id, partner_id):
            if not await self._is_available(user_id):
                raise PreconditionError(
                    ErrorCode.NOT_AVAILABLE,
                    f"User {user_id} is not available for matching",
                )

        if matching_preferences is None:
            prefs = await self.preferences.get(requester_id)
            if prefs is not None:
                matching_preferences = MatchProfile.from_preferences(prefs).snapshot()

        return await self.create(
            requester_id,
            partner_id,
            partnership_type,
            matching_preferences,
            auto_approved,
        )

    @guarded_operation("request specific partner")
    async def request_specific(
        self,
        requester_id: str,
        partner_id: str,
        partnership_type: str = PartnershipType.P2P.value,
    ) -> OperationResult[Partnership]:
        """
        Manual request for a chosen partner.

        Both users need preferences and at least the configured minimum
        compatibility. The partnership starts as pending.
        """
        requester_prefs = await self.preferences.get(requester_id)
        partner_prefs = await self.preferences.get(partner_id)
        if requester_prefs is None or partner_prefs is None:
            raise PreconditionError(
                ErrorCode.NO_PREFERENCES,
                "Both users need partnership preferences before a request",
            )

        requester = MatchProfile.from_preferences(requester_prefs)
        score = calculate_compatibility(requester, MatchProfile.from_preferences(partner_prefs))
        if score < self.min_manual_compatibility:
            raise PreconditionError(
                ErrorCode.LOW_COMPATIBILITY,
                f"Compatibility score {score} is below the minimum of {self.min_manual_compatibility}",
            )

        snapshot = requester.snapshot()
        snapshot["compatibility_score"] = score
        return await self.request(
            requester_id,
            partner_id,
            partnership_type,
            auto_approved=False,
            matching_preferences=snapshot,
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @guarded_operation("accept partnership")
    async def accept(self, partnership_id: str, user_id: str) -> OperationResult[Partnership]:
        partnership = await self._transition(partnership_id, user_id, "accept")
        await self.notifier.partner_assigned(partnership.id, partnership.user1_id, partnership.user2_id)
        return OperationResult.ok(partnership, "Partnership accepted")

    @guarded_operation("decline partnership")
    async def decline(self, partnership_id: str, user_id: str) -> OperationResult[Partnership]:
        partnership = await self._transition(partnership_id, user_id, "decline", reason="declined")
        return OperationResult.ok(partnership, "Partnership declined")

    @guarded_operation("pause partnership")
    async def pause(self, partnership_id: str, user_id: str) -> OperationResult[Partnership]:
        partnership = await self._transition(partnership_id, user_id, "pause")
        return OperationResult.ok(partnership, "Partnership paused")

    @guarded_operation("resume partnership")
    async def resume(self, partnership_id: str, user_id: str) -> OperationResult[Partnership]:
        partnership = await self._transition(partnership_id, user_id, "resume")
        return OperationResult.ok(partnership, "Partnership resumed")

    @guarded_operation("end partnership")
    async def end(self, partnership_id: str, user_id: str, reason: Optional[str] = None) -> OperationResult[Partnership]:
        partnership = await self._transition(partnership_id, user_id, "end", reason=reason)
        return OperationResult.ok(partnership, "Partnership ended")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @wraps_store_errors("load partnership")
    async def get(self, partnership_id: str) -> Optional[Partnership]:
        return await self.partnerships.get_by_id(partnership_id)

    @wraps_store_errors("load partnership for user")
    async def get_for_user(self, user_id: str) -> Optional[Partnership]:
        """The single active-or-pending partnership of a user, if any."""
        return await self.partnerships.get_open_for_user(user_id)

    @wraps_store_errors("list partnership history")
    async def list_for_user(self, user_id: str) -> Sequence[Partnership]:
        return await self.partnerships.get_for_user(user_id)

    @wraps_store_errors("list active partnerships")
    async def list_active(self) -> list[Partnership]:
        return [p for p in await self.partnerships.get_open() if p.status == ACTIVE]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _transition(
        self,
        partnership_id: str,
        user_id: str,
        action: str,
        reason: Optional[str] = None,
    ) -> Partnership:
        partnership = await self.partnerships.get_by_id(partnership_id)
        if partnership is None:
            raise NotFoundError(f"Partnership {partnership_id} not found")
        if not partnership.is_participant(user_id):
            raise UnauthorizedError(f"User {user_id} is not part of partnership {partnership_id}")

        sources, target = TRANSITIONS[action]
        if partnership.status not in sources:
            raise PreconditionError(
                ErrorCode.INVALID_TRANSITION,
                f"Cannot {action} a partnership that is {partnership.status}",
            )

        now = utcnow()
        metrics = dict(partnership.metrics or initial_metrics(now))
        metrics["last_interaction"] = now.isoformat()
        fields: dict[str, Any] = {"status": target, "metrics": metrics}
        if target == ACTIVE and partnership.started_at is None:
            fields["started_at"] = now
        if target == ENDED:
            fields["ended_at"] = now
            fields["end_reason"] = reason

        previous = partnership.status
        partnership = await self.partnerships.apply(partnership, **fields)
        logger.info(f"Partnership {partnership.id}: {previous} -> {target} by {user_id}")

        if target == ENDED:
            await self._release((partnership.user1_id, partnership.user2_id))
            await self.notifier.partnership_ended(
                partnership.id,
                user_id,
                partnership.other_member(user_id),
                reason,
            )
        return partnership

    async def _is_available(self, user_id: str) -> bool:
        prefs = await self.preferences.get(user_id)
        if prefs is not None:
            return bool(prefs.is_available_for_matching)
        expert = await self.experts.get_by_user(user_id)
        return expert is not None and bool(expert.is_available_for_matching) and expert.has_capacity

    async def _claim_pair(self, user1_id: str, user2_id: str) -> list[str]:
        """
        Claim both users for the new partnership.

        Users without a preferences record (experts) are not claimed. If the
        second claim loses a race the first one is released again.
        """
        claimed: list[str] = []
        for user_id in (user1_id, user2_id):
            if await self.preferences.get(user_id) is None:
                continue
            if not await self.preferences.claim_for_matching(user_id):
                await self._release(claimed)
                raise PreconditionError(
                    ErrorCode.NOT_AVAILABLE,
                    f"User {user_id} is no longer available for matching",
                )
            claimed.append(user_id)
        return claimed

    async def _release(self, user_ids) -> None:
        for user_id in user_ids:
            await self.preferences.set_availability(user_id, True)
