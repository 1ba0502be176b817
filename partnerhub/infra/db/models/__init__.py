"""
SQLAlchemy models for PartnerHub.

Exports all models for easy importing.
"""
from partnerhub.infra.db.base import Base

# Import all models so they're registered with Base
from partnerhub.infra.db.models.preferences import (
    PartnershipPreferences,
    PartnerType,
    TimeCommitment,
    ExperienceLevel,
)
from partnerhub.infra.db.models.expert import ExpertProfile
from partnerhub.infra.db.models.partnership import Partnership, PartnershipStatus, PartnershipType
from partnerhub.infra.db.models.shared_goal import SharedGoal
from partnerhub.infra.db.models.partner_task import (
    PartnerTask,
    TaskStatus,
    VerificationStatus,
    HistoryAction,
    TaskPriority,
)
from partnerhub.infra.db.models.notification import (
    PartnerNotification,
    NotificationType,
    NotificationPriority,
)

__all__ = [
    "Base",
    "PartnershipPreferences",
    "PartnerType",
    "TimeCommitment",
    "ExperienceLevel",
    "ExpertProfile",
    "Partnership",
    "PartnershipStatus",
    "PartnershipType",
    "SharedGoal",
    "PartnerTask",
    "TaskStatus",
    "VerificationStatus",
    "HistoryAction",
    "TaskPriority",
    "PartnerNotification",
    "NotificationType",
    "NotificationPriority",
]
