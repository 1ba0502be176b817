"""
Preferences repository for CRUD operations on partnership preferences.
"""
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.base import utcnow
from partnerhub.infra.db.models.preferences import PartnershipPreferences, PartnerType, TimeCommitment
from partnerhub.infra.db.repositories.base import BaseRepository


class PreferencesRepository(BaseRepository[PartnershipPreferences]):
    """Repository for PartnershipPreferences CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(PartnershipPreferences, session)
    
    async def get_by_user(self, user_id: str) -> Optional[PartnershipPreferences]:
        """Get the preferences record of a user."""
        stmt = select(PartnershipPreferences).where(PartnershipPreferences.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
    
    async def query(
        self,
        available_only: bool = False,
        partner_types: Optional[Sequence[str]] = None,
        time_commitments: Optional[Sequence[str]] = None,
    ) -> Sequence[PartnershipPreferences]:
        """
        Server-side candidate filter.
        
        Args:
            available_only: Only users with is_available_for_matching set
            partner_types: Allowed preferred_partner_type values
            time_commitments: Allowed time_commitment values
            
        Returns:
            Matching records in insertion order
        """
        stmt = select(PartnershipPreferences)
        if available_only:
            stmt = stmt.where(PartnershipPreferences.is_available_for_matching.is_(True))
        if partner_types:
            stmt = stmt.where(PartnershipPreferences.preferred_partner_type.in_(list(partner_types)))
        if time_commitments:
            stmt = stmt.where(PartnershipPreferences.time_commitment.in_(list(time_commitments)))
        stmt = stmt.order_by(PartnershipPreferences.created_at.asc())
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def set_availability(self, user_id: str, available: bool) -> bool:
        """Targeted availability update. Returns False if the user has no record."""
        now = utcnow()
        stmt = (
            update(PartnershipPreferences)
            .where(PartnershipPreferences.user_id == user_id)
            .values(is_available_for_matching=available, updated_at=now, last_active_at=now)
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    async def claim(self, user_id: str) -> bool:
        """
        Flip is_available_for_matching from True to False.
        
        The WHERE clause makes this a compare-and-swap: when two matches race
        for the same user only one of them sees rowcount == 1.
        """
        now = utcnow()
        stmt = (
            update(PartnershipPreferences)
            .where(
                PartnershipPreferences.user_id == user_id,
                PartnershipPreferences.is_available_for_matching == True,  # noqa: E712
            )
            .values(is_available_for_matching=False, updated_at=now, last_active_at=now)
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount == 1


def allowed_partner_types(partner_type: str) -> Optional[list[str]]:
    """Candidate types compatible with a requester type; None means no filter."""
    if partner_type == PartnerType.EITHER.value:
        return None
    return [partner_type, PartnerType.EITHER.value]


def allowed_time_commitments(commitment: Optional[str]) -> Optional[list[str]]:
    """Candidate commitments compatible with a requester commitment; None means no filter."""
    if not commitment or commitment == TimeCommitment.FLEXIBLE.value:
        return None
    return [commitment, TimeCommitment.FLEXIBLE.value]
