"""
PartnerNotification SQLAlchemy model.

Rows double as an outbox: they are written by the core and picked up
later by a delivery step that flips the *_sent flags.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partnerhub.infra.db.base import Base


class NotificationType(str, Enum):
    PARTNER_ASSIGNED = "partner_assigned"
    PARTNERSHIP_REQUEST = "partnership_request"
    PARTNERSHIP_ENDED = "partnership_ended"
    TASK_COMPLETED = "task_completed"
    VERIFICATION_REQUEST = "verification_request"
    VERIFICATION_APPROVED = "verification_approved"
    VERIFICATION_REJECTED = "verification_rejected"
    REDO_REQUESTED = "redo_requested"
    GOAL_SHARED = "goal_shared"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class PartnerNotification(Base):
    """A delivery request addressed to one user."""
    
    __tablename__ = "partner_notifications"
    
    partnership_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    from_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    to_user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    
    type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String(10), default=NotificationPriority.NORMAL.value)
    
    # Related entities
    related_task_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    related_goal_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    
    # Delivery tracking
    email_sent: Mapped[bool] = mapped_column(Boolean, default=False)
    email_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    push_sent: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    push_sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    
    # User interaction
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    
    def __repr__(self) -> str:
        return f"<PartnerNotification(id={self.id}, type={self.type}, to={self.to_user_id})>"
