"""
PartnerTask SQLAlchemy model.

A task under a shared goal. The owner marks it done, the partner verifies.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partnerhub.infra.db.base import Base


class TaskStatus(str, Enum):
    """Work status of a partner task."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    MARKED_DONE = "marked_done"
    VERIFIED = "verified"
    REJECTED = "rejected"


class VerificationStatus(str, Enum):
    """Verification status, tracked independently of TaskStatus."""
    NOT_REQUIRED = "not_required"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REDO_REQUESTED = "redo_requested"


class HistoryAction(str, Enum):
    """Actions recorded in verification_history."""
    STARTED = "started"
    MARKED_DONE = "marked_done"
    VERIFIED = "verified"
    REJECTED = "rejected"
    REDO_REQUESTED = "redo_requested"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PartnerTask(Base):
    """
    A single actionable unit under a SharedGoal.
    
    verification_history is append-only: one entry per status transition.
    """
    
    __tablename__ = "partner_tasks"
    
    shared_goal_id: Mapped[str] = mapped_column(ForeignKey("shared_goals.id"), nullable=False, index=True)
    partnership_id: Mapped[str] = mapped_column(ForeignKey("partnerships.id"), nullable=False, index=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    partner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(10), default=TaskPriority.MEDIUM.value)
    estimated_time: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)  # e.g. "30 minutes"
    tags: Mapped[list] = mapped_column(JSON, default=list)
    
    # Status
    status: Mapped[str] = mapped_column(String(20), default=TaskStatus.PENDING.value, index=True)
    verification_status: Mapped[str] = mapped_column(String(20), default=VerificationStatus.NOT_REQUIRED.value)
    verification_required: Mapped[bool] = mapped_column(Boolean, default=True)
    
    # Timing
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    marked_done_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    
    # Verification
    verification_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    verification_evidence: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # URL to proof
    verification_history: Mapped[list] = mapped_column(JSON, default=list)
    
    def __repr__(self) -> str:
        return f"<PartnerTask(id={self.id}, status={self.status})>"
