"""
API Schemas for partnerships and matching.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from partnerhub.infra.db.models.partnership import PartnershipType


class PartnershipRequest(BaseModel):
    """Manual request for a specific partner."""
    partner_id: str
    partnership_type: PartnershipType = PartnershipType.P2P


class EndPartnershipRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class PartnershipResponse(BaseModel):
    id: str
    user1_id: str
    user2_id: str
    partnership_type: str
    status: str
    matched_at: datetime
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    end_reason: Optional[str] = None
    matching_preferences: dict = Field(default_factory=dict)
    partnership_rules: dict = Field(default_factory=dict)
    metrics: dict = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class MatchResponse(BaseModel):
    """Result of an automatic match."""
    message: str
    partnership: PartnershipResponse


class CandidateResponse(BaseModel):
    user_id: str
    compatibility: int
    preferred_partner_type: str
    support_style: list[str] = Field(default_factory=list)
    available_categories: list[str] = Field(default_factory=list)
    time_commitment: str
    experience_level: str
    timezone: Optional[str] = None
    bio: Optional[str] = None


class InsightsResponse(BaseModel):
    compatibility: int
    shared_categories: list[str] = Field(default_factory=list)
    strength_areas: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)


class PartnershipStatsResponse(BaseModel):
    total_goals: int
    completed_goals: int
    total_tasks: int
    completed_tasks: int
    pending_verifications: int
    completion_rate: int
