"""
Preference Store.

Upsert/get/availability operations over per-user matching preferences.
Store errors propagate; callers decide how to report them.
"""
import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.base import utcnow
from partnerhub.infra.db.models.preferences import PartnershipPreferences
from partnerhub.infra.db.repositories.preferences import PreferencesRepository

logger = logging.getLogger(__name__)

# Fields a client may set; availability and timestamps are managed here
EDITABLE_FIELDS = (
    "preferred_partner_type",
    "support_style",
    "available_categories",
    "goal_categories",
    "time_commitment",
    "experience_level",
    "timezone",
    "preferred_meeting_times",
    "bio",
)


class PreferenceStore:
    """At most one preferences record per user."""
    
    def __init__(self, session: AsyncSession):
        self.repo = PreferencesRepository(session)
    
    async def upsert(self, user_id: str, data: dict[str, Any]) -> PartnershipPreferences:
        """Update the user's record if one exists, otherwise create it as available."""
        fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        now = utcnow()
        
        existing = await self.repo.get_by_user(user_id)
        if existing is not None:
            logger.info(f"Updating preferences for user {user_id}")
            return await self.repo.apply(existing, last_active_at=now, **fields)
        
        logger.info(f"Creating preferences for user {user_id}")
        return await self.repo.create(
            user_id=user_id,
            is_available_for_matching=True,
            last_active_at=now,
            **fields,
        )
    
    async def get(self, user_id: str) -> Optional[PartnershipPreferences]:
        """The user's preferences, or None when never saved."""
        return await self.repo.get_by_user(user_id)
    
    async def set_availability(self, user_id: str, available: bool) -> bool:
        """Returns False when the user has no preferences record."""
        updated = await self.repo.set_availability(user_id, available)
        if updated:
            logger.info(f"User {user_id} available_for_matching={available}")
        return updated
    
    async def claim_for_matching(self, user_id: str) -> bool:
        """Conditionally take a user out of the matching pool (True -> False)."""
        return await self.repo.claim(user_id)
