"""
Expert repository for CRUD operations on expert profiles.
"""
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.models.expert import ExpertProfile
from partnerhub.infra.db.repositories.base import BaseRepository


class ExpertRepository(BaseRepository[ExpertProfile]):
    """Repository for ExpertProfile CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(ExpertProfile, session)
    
    async def get_by_user(self, user_id: str) -> Optional[ExpertProfile]:
        stmt = select(ExpertProfile).where(ExpertProfile.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
    
    async def get_available(self) -> Sequence[ExpertProfile]:
        """All experts open for matching, best rated first."""
        stmt = (
            select(ExpertProfile)
            .where(ExpertProfile.is_available_for_matching.is_(True))
            .order_by(ExpertProfile.rating.desc(), ExpertProfile.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
    
    async def get_available_by_expertise(self, category: str) -> list[ExpertProfile]:
        """
        Available experts whose expertise_areas contain the category.
        
        Array membership on a JSON column is not portable across backends,
        so the contains-check runs here after the availability query.
        """
        experts = await self.get_available()
        return [e for e in experts if category in (e.expertise_areas or [])]
    
    async def increment_clients(self, user_id: str) -> Optional[ExpertProfile]:
        """Count one more client against the expert's capacity."""
        expert = await self.get_by_user(user_id)
        if expert is None:
            return None
        return await self.apply(expert, total_clients_helped=expert.total_clients_helped + 1)
