"""
Partnership repository for CRUD operations on partnerships.
"""
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.models.partnership import OPEN_STATUSES, Partnership
from partnerhub.infra.db.repositories.base import BaseRepository


class PartnershipRepository(BaseRepository[Partnership]):
    """Repository for Partnership CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(Partnership, session)
    
    async def get_open_for_user(self, user_id: str) -> Optional[Partnership]:
        """Get the active-or-pending partnership a user is part of, if any."""
        stmt = (
            select(Partnership)
            .where(or_(Partnership.user1_id == user_id, Partnership.user2_id == user_id))
            .where(Partnership.status.in_(OPEN_STATUSES))
            .order_by(Partnership.matched_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
    
    async def get_for_user(self, user_id: str, limit: int = 100) -> Sequence[Partnership]:
        """All partnerships a user has ever been part of, newest first."""
        stmt = (
            select(Partnership)
            .where(or_(Partnership.user1_id == user_id, Partnership.user2_id == user_id))
            .order_by(Partnership.matched_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_open(self) -> Sequence[Partnership]:
        """All active or pending partnerships."""
        stmt = (
            select(Partnership)
            .where(Partnership.status.in_(OPEN_STATUSES))
            .order_by(Partnership.matched_at.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
