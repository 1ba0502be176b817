"""
Partnership SQLAlchemy model.

A Partnership pairs exactly two users. It is never deleted; it ends.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partnerhub.infra.db.base import Base, utcnow


class PartnershipType(str, Enum):
    P2P = "p2p"
    PREMIUM_EXPERT = "premium_expert"


class PartnershipStatus(str, Enum):
    """Lifecycle of a partnership."""
    PENDING = "pending"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


# Statuses that count as "currently partnered"
OPEN_STATUSES = (PartnershipStatus.ACTIVE.value, PartnershipStatus.PENDING.value)


def default_rules() -> dict:
    return {
        "verification_required": True,
        "reminder_frequency": "weekly",
        "allow_task_creation": True,
    }


def initial_metrics(now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    return {
        "total_shared_goals": 0,
        "total_tasks_verified": 0,
        "average_verification_time_hours": 0.0,
        "last_interaction": now.isoformat(),
    }


class Partnership(Base):
    """Pairing of two users tracked through pending/active/paused/ended."""
    
    __tablename__ = "partnerships"
    
    user1_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user2_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    partnership_type: Mapped[str] = mapped_column(String(20), default=PartnershipType.P2P.value)
    status: Mapped[str] = mapped_column(String(20), default=PartnershipStatus.PENDING.value, index=True)
    
    # Timing
    matched_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    end_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    
    # Snapshot of the requester's preferences at match time
    matching_preferences: Mapped[dict] = mapped_column(JSON, default=dict)
    partnership_rules: Mapped[dict] = mapped_column(JSON, default=default_rules)
    metrics: Mapped[dict] = mapped_column(JSON, default=lambda: initial_metrics())
    
    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.user1_id, self.user2_id)
    
    def other_member(self, user_id: str) -> str:
        return self.user2_id if user_id == self.user1_id else self.user1_id
    
    def __repr__(self) -> str:
        return f"<Partnership(id={self.id}, status={self.status})>"
