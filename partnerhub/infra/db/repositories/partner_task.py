"""
PartnerTask repository.
"""
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.models.partner_task import PartnerTask, TaskStatus, VerificationStatus
from partnerhub.infra.db.repositories.base import BaseRepository


class PartnerTaskRepository(BaseRepository[PartnerTask]):
    """Repository for PartnerTask CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(PartnerTask, session)
    
    async def get_by_goal(self, goal_id: str) -> Sequence[PartnerTask]:
        stmt = (
            select(PartnerTask)
            .where(PartnerTask.shared_goal_id == goal_id)
            .order_by(PartnerTask.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_by_partnership(self, partnership_id: str) -> Sequence[PartnerTask]:
        stmt = (
            select(PartnerTask)
            .where(PartnerTask.partnership_id == partnership_id)
            .order_by(PartnerTask.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_pending_verification(self, partner_id: str) -> Sequence[PartnerTask]:
        """Tasks waiting for this user's verdict, oldest submission first."""
        stmt = (
            select(PartnerTask)
            .where(PartnerTask.partner_id == partner_id)
            .where(PartnerTask.status == TaskStatus.MARKED_DONE.value)
            .where(PartnerTask.verification_status == VerificationStatus.PENDING.value)
            .order_by(PartnerTask.marked_done_at.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
