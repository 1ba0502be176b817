"""
SharedGoal repository.
"""
from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.models.shared_goal import SharedGoal
from partnerhub.infra.db.repositories.base import BaseRepository


class SharedGoalRepository(BaseRepository[SharedGoal]):
    """Repository for SharedGoal CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(SharedGoal, session)
    
    async def get_by_partnership(self, partnership_id: str) -> Sequence[SharedGoal]:
        stmt = (
            select(SharedGoal)
            .where(SharedGoal.partnership_id == partnership_id)
            .order_by(SharedGoal.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_by_user(self, user_id: str) -> Sequence[SharedGoal]:
        """Goals the user owns or verifies."""
        stmt = (
            select(SharedGoal)
            .where(or_(SharedGoal.owner_id == user_id, SharedGoal.partner_id == user_id))
            .order_by(SharedGoal.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
