"""
ExpertProfile SQLAlchemy model.
"""
from typing import Optional

from sqlalchemy import JSON, Boolean, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from partnerhub.infra.db.base import Base

DEFAULT_MAX_CLIENTS = 5


def default_availability() -> dict:
    return {"time_slots": [], "timezone": "", "max_clients": DEFAULT_MAX_CLIENTS}


class ExpertProfile(Base):
    """
    A domain expert that can be matched as a premium partner.
    
    Matchable only while is_available_for_matching is set and
    total_clients_helped < availability["max_clients"].
    """
    
    __tablename__ = "expert_profiles"
    
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    
    expertise_areas: Mapped[list] = mapped_column(JSON, default=list)
    years_of_experience: Mapped[int] = mapped_column(Integer, default=0)
    certifications: Mapped[list] = mapped_column(JSON, default=list)
    specializations: Mapped[list] = mapped_column(JSON, default=list)
    hourly_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    availability: Mapped[dict] = mapped_column(JSON, default=default_availability)
    
    bio: Mapped[str] = mapped_column(Text, default="")
    achievements: Mapped[list] = mapped_column(JSON, default=list)
    success_stories: Mapped[list] = mapped_column(JSON, default=list)
    
    is_available_for_matching: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    rating: Mapped[float] = mapped_column(Float, default=0.0)
    total_clients_helped: Mapped[int] = mapped_column(Integer, default=0)
    
    @property
    def max_clients(self) -> int:
        return int((self.availability or {}).get("max_clients", DEFAULT_MAX_CLIENTS))
    
    @property
    def has_capacity(self) -> bool:
        return self.total_clients_helped < self.max_clients
    
    def __repr__(self) -> str:
        return f"<ExpertProfile(user_id={self.user_id}, rating={self.rating})>"
