"""
Expert profile management.
"""
import logging
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.models.expert import ExpertProfile, default_availability
from partnerhub.infra.db.repositories.expert import ExpertRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "expertise_areas",
    "years_of_experience",
    "certifications",
    "specializations",
    "hourly_rate",
    "availability",
    "bio",
    "achievements",
    "success_stories",
    "is_available_for_matching",
)

# Only maintained by the platform, never by the expert
ADMIN_FIELDS = ("rating", "total_clients_helped")


class ExpertService:
    """CRUD over expert profiles (one per user)."""
    
    def __init__(self, session: AsyncSession):
        self.repo = ExpertRepository(session)
    
    async def create(self, user_id: str, data: dict[str, Any]) -> ExpertProfile:
        """Create or replace the expert profile of a user; rating and clients start at zero."""
        fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        fields["availability"] = {**default_availability(), **(fields.get("availability") or {})}
        
        existing = await self.repo.get_by_user(user_id)
        if existing is not None:
            logger.info(f"Expert profile for {user_id} exists, updating instead")
            return await self.repo.apply(existing, **fields)
        
        logger.info(f"Creating expert profile for user {user_id}")
        return await self.repo.create(user_id=user_id, rating=0.0, total_clients_helped=0, **fields)
    
    async def get(self, user_id: str) -> Optional[ExpertProfile]:
        return await self.repo.get_by_user(user_id)
    
    async def update(self, user_id: str, data: dict[str, Any], allow_admin_fields: bool = False) -> Optional[ExpertProfile]:
        allowed = EDITABLE_FIELDS + ADMIN_FIELDS if allow_admin_fields else EDITABLE_FIELDS
        fields = {k: v for k, v in data.items() if k in allowed}
        
        existing = await self.repo.get_by_user(user_id)
        if existing is None:
            return None
        if "availability" in fields:
            fields["availability"] = {**(existing.availability or default_availability()), **(fields["availability"] or {})}
        return await self.repo.apply(existing, **fields)
    
    async def list_available(self) -> Sequence[ExpertProfile]:
        return await self.repo.get_available()
    
    async def list_by_category(self, category: str) -> Sequence[ExpertProfile]:
        return await self.repo.get_available_by_expertise(category)
    
    async def delete(self, user_id: str) -> bool:
        existing = await self.repo.get_by_user(user_id)
        if existing is None:
            return False
        return await self.repo.delete(existing.id)
