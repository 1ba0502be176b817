"""
PartnerNotification repository.
"""
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.base import generate_id
from partnerhub.infra.db.models.notification import PartnerNotification
from partnerhub.infra.db.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[PartnerNotification]):
    """Repository for PartnerNotification CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(PartnerNotification, session)
    
    async def add(self, **kwargs) -> PartnerNotification:
        """Stage an outbox row and flush it without committing."""
        obj = PartnerNotification(id=generate_id(), **kwargs)
        self.session.add(obj)
        await self.session.flush()
        return obj
    
    async def get_for_recipient(
        self,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> Sequence[PartnerNotification]:
        stmt = select(PartnerNotification).where(PartnerNotification.to_user_id == user_id)
        if unread_only:
            stmt = stmt.where(PartnerNotification.is_read.is_(False))
        stmt = stmt.order_by(PartnerNotification.created_at.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_by_partnership(self, partnership_id: str, limit: int = 50) -> Sequence[PartnerNotification]:
        stmt = (
            select(PartnerNotification)
            .where(PartnerNotification.partnership_id == partnership_id)
            .order_by(PartnerNotification.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_undelivered(self, limit: int = 50) -> Sequence[PartnerNotification]:
        """Outbox rows not yet handed to the push channel, oldest first."""
        stmt = (
            select(PartnerNotification)
            .where(PartnerNotification.push_sent.is_(False))
            .order_by(PartnerNotification.created_at.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
