"""
Repositories - one per collection.
"""
from partnerhub.infra.db.repositories.base import BaseRepository
from partnerhub.infra.db.repositories.preferences import PreferencesRepository
from partnerhub.infra.db.repositories.expert import ExpertRepository
from partnerhub.infra.db.repositories.partnership import PartnershipRepository
from partnerhub.infra.db.repositories.shared_goal import SharedGoalRepository
from partnerhub.infra.db.repositories.partner_task import PartnerTaskRepository
from partnerhub.infra.db.repositories.notification import NotificationRepository

__all__ = [
    "BaseRepository",
    "PreferencesRepository",
    "ExpertRepository",
    "PartnershipRepository",
    "SharedGoalRepository",
    "PartnerTaskRepository",
    "NotificationRepository",
]
