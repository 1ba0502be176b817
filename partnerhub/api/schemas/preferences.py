"""
API Schemas for partnership preferences.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from partnerhub.infra.db.models.preferences import ExperienceLevel, PartnerType, TimeCommitment


class PreferencesUpsert(BaseModel):
    """Request body for saving a user's matching preferences."""
    preferred_partner_type: PartnerType = PartnerType.EITHER
    support_style: list[str] = Field(default_factory=list, description="e.g. daily_checkin, weekly_review")
    available_categories: list[str] = Field(default_factory=list)
    goal_categories: list[str] = Field(
        default_factory=list,
        description="Categories to look for an expert in before peer matching",
    )
    time_commitment: TimeCommitment = TimeCommitment.FLEXIBLE
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    timezone: Optional[str] = None
    preferred_meeting_times: list[str] = Field(default_factory=list)
    bio: Optional[str] = Field(None, max_length=2000)


class AvailabilityUpdate(BaseModel):
    available: bool


class PreferencesResponse(BaseModel):
    id: str
    user_id: str
    preferred_partner_type: str
    support_style: list[str] = Field(default_factory=list)
    available_categories: list[str] = Field(default_factory=list)
    goal_categories: list[str] = Field(default_factory=list)
    time_commitment: str
    experience_level: str
    is_available_for_matching: bool
    timezone: Optional[str] = None
    preferred_meeting_times: list[str] = Field(default_factory=list)
    bio: Optional[str] = None
    last_active_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
