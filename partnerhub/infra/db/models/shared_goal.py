"""
SharedGoal SQLAlchemy model.

A goal visible to both members of a partnership. The owner works on it,
the partner verifies its tasks.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partnerhub.infra.db.base import Base, utcnow


def empty_progress(now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    return {
        "total_tasks": 0,
        "completed_tasks": 0,
        "verified_tasks": 0,
        "last_updated": now.isoformat(),
    }


class SharedGoal(Base):
    """Goal shared inside a partnership."""
    
    __tablename__ = "shared_goals"
    
    partnership_id: Mapped[str] = mapped_column(ForeignKey("partnerships.id"), nullable=False, index=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    partner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    support_style: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    accountability: Mapped[dict] = mapped_column(JSON, default=dict)
    
    # Cached aggregate over child tasks; only recompute_goal_progress writes it
    progress: Mapped[dict] = mapped_column(JSON, default=lambda: empty_progress())
    
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    is_shared: Mapped[bool] = mapped_column(Boolean, default=True)
    
    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.owner_id, self.partner_id)
    
    def __repr__(self) -> str:
        return f"<SharedGoal(id={self.id}, title={self.title})>"
