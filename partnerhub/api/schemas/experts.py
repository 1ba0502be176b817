"""
API Schemas for expert profiles.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ExpertAvailability(BaseModel):
    time_slots: list[str] = Field(default_factory=list)
    timezone: str = ""
    max_clients: int = Field(5, ge=0)


class ExpertCreate(BaseModel):
    expertise_areas: list[str] = Field(..., min_length=1)
    years_of_experience: int = Field(0, ge=0)
    certifications: list[str] = Field(default_factory=list)
    specializations: list[str] = Field(default_factory=list)
    hourly_rate: Optional[float] = Field(None, ge=0)
    availability: ExpertAvailability = Field(default_factory=ExpertAvailability)
    bio: str = ""
    achievements: list[str] = Field(default_factory=list)
    success_stories: list[str] = Field(default_factory=list)
    is_available_for_matching: bool = True


class ExpertUpdate(BaseModel):
    """Partial update; only provided fields are written."""
    expertise_areas: Optional[list[str]] = None
    years_of_experience: Optional[int] = Field(None, ge=0)
    certifications: Optional[list[str]] = None
    specializations: Optional[list[str]] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    availability: Optional[ExpertAvailability] = None
    bio: Optional[str] = None
    achievements: Optional[list[str]] = None
    success_stories: Optional[list[str]] = None
    is_available_for_matching: Optional[bool] = None


class ExpertResponse(BaseModel):
    id: str
    user_id: str
    expertise_areas: list[str] = Field(default_factory=list)
    years_of_experience: int
    certifications: list[str] = Field(default_factory=list)
    specializations: list[str] = Field(default_factory=list)
    hourly_rate: Optional[float] = None
    availability: dict = Field(default_factory=dict)
    bio: str = ""
    achievements: list[str] = Field(default_factory=list)
    success_stories: list[str] = Field(default_factory=list)
    is_available_for_matching: bool
    rating: float
    total_clients_helped: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
