"""
PartnershipPreferences SQLAlchemy model.

One record per user describing who they want to be matched with.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partnerhub.infra.db.base import Base, utcnow


class PartnerType(str, Enum):
    """Kind of partner a user is looking for."""
    P2P = "p2p"
    PREMIUM_EXPERT = "premium_expert"
    EITHER = "either"


class TimeCommitment(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    FLEXIBLE = "flexible"


class ExperienceLevel(str, Enum):
    """Ordinal scale: beginner < intermediate < advanced."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PartnershipPreferences(Base):
    """Matching preferences of a single user."""
    
    __tablename__ = "partnership_preferences"
    
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    
    preferred_partner_type: Mapped[str] = mapped_column(String(20), default=PartnerType.EITHER.value)
    support_style: Mapped[list] = mapped_column(JSON, default=list)
    available_categories: Mapped[list] = mapped_column(JSON, default=list)
    goal_categories: Mapped[list] = mapped_column(JSON, default=list)  # used for expert routing
    time_commitment: Mapped[str] = mapped_column(String(20), default=TimeCommitment.FLEXIBLE.value)
    experience_level: Mapped[str] = mapped_column(String(20), default=ExperienceLevel.BEGINNER.value)
    
    # False while the user holds a pending/active/paused partnership
    is_available_for_matching: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    
    timezone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    preferred_meeting_times: Mapped[list] = mapped_column(JSON, default=list)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_active_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    
    def __repr__(self) -> str:
        return f"<PartnershipPreferences(user_id={self.user_id}, available={self.is_available_for_matching})>"
