"""
Shared Goal & Task Manager.

Task status machine:

    pending -> in_progress -> marked_done -> verified
                                         -> rejected
                              marked_done -> pending   (redo requested)

Tasks that need no verification go from pending/in_progress straight to
verified. Every transition appends exactly one verification_history entry.
Goal progress is a cached aggregate rebuilt from the goal's tasks after each
task mutation.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.infra.db.base import utcnow
from partnerhub.infra.db.models.notification import NotificationType
from partnerhub.infra.db.models.partner_task import (
    HistoryAction,
    PartnerTask,
    TaskPriority,
    TaskStatus,
    VerificationStatus,
)
from partnerhub.infra.db.models.partnership import Partnership, PartnershipStatus, initial_metrics
from partnerhub.infra.db.models.shared_goal import SharedGoal, empty_progress
from partnerhub.infra.db.repositories.partner_task import PartnerTaskRepository
from partnerhub.infra.db.repositories.partnership import PartnershipRepository
from partnerhub.infra.db.repositories.shared_goal import SharedGoalRepository
from partnerhub.matching.scorer import round_half_up

from .errors import (
    ErrorCode,
    NotFoundError,
    PreconditionError,
    UnauthorizedError,
    parse_choice,
    wraps_store_errors,
)
from .notifications import NotificationDispatcher
from .results import OperationResult, guarded_operation

logger = logging.getLogger(__name__)

GOAL_EDITABLE_FIELDS = (
    "title",
    "description",
    "category",
    "deadline",
    "support_style",
    "accountability",
    "is_shared",
)

# Statuses from which the owner may mark a task as done
DONE_SOURCES = (TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value)


class VerificationAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_REDO = "request_redo"


# action -> (task status, verification status, history action, notification type)
VERDICTS = {
    VerificationAction.APPROVE: (
        TaskStatus.VERIFIED,
        VerificationStatus.APPROVED,
        HistoryAction.VERIFIED,
        NotificationType.VERIFICATION_APPROVED,
    ),
    VerificationAction.REJECT: (
        TaskStatus.REJECTED,
        VerificationStatus.REJECTED,
        HistoryAction.REJECTED,
        NotificationType.VERIFICATION_REJECTED,
    ),
    VerificationAction.REQUEST_REDO: (
        TaskStatus.PENDING,
        VerificationStatus.REDO_REQUESTED,
        HistoryAction.REDO_REQUESTED,
        NotificationType.REDO_REQUESTED,
    ),
}


@dataclass
class PartnershipStats:
    total_goals: int
    completed_goals: int
    total_tasks: int
    completed_tasks: int
    pending_verifications: int
    completion_rate: int


def history_entry(action: HistoryAction, by: str, at: datetime, comment: Optional[str] = None) -> dict:
    entry = {"action": action.value, "by": by, "at": at.isoformat()}
    if comment:
        entry["comment"] = comment
    return entry


def completion_rate(completed: int, total: int) -> int:
    """completed / total as a rounded percentage; 0 for no tasks."""
    if total == 0:
        return 0
    return round_half_up(completed / total * 100)


class SharedGoalService:
    """Goals and tasks inside a partnership."""

    def __init__(self, session: AsyncSession, notifier: Optional[NotificationDispatcher] = None):
        self.session = session
        self.partnerships = PartnershipRepository(session)
        self.goals = SharedGoalRepository(session)
        self.tasks = PartnerTaskRepository(session)
        self.notifier = notifier or NotificationDispatcher(session)

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    @guarded_operation("create shared goal")
    async def create_goal(
        self,
        partnership_id: str,
        creator_id: str,
        title: str,
        category: str,
        description: Optional[str] = None,
        deadline: Optional[datetime] = None,
        support_style: Optional[str] = None,
        accountability: Optional[dict[str, Any]] = None,
    ) -> OperationResult[SharedGoal]:
        """
        Create a goal owned by creator_id and verified by the other member.

        The partnership must be active. Progress starts at zero.
        """
        partnership = await self._load_partnership(partnership_id)
        if not partnership.is_participant(creator_id):
            raise UnauthorizedError("Only partnership members can create shared goals")
        if partnership.status != PartnershipStatus.ACTIVE.value:
            raise PreconditionError(
                ErrorCode.PARTNERSHIP_NOT_ACTIVE,
                f"Partnership is {partnership.status}, goals can only be added while active",
            )

        rules = partnership.partnership_rules or {}
        goal = await self.goals.create(
            partnership_id=partnership_id,
            owner_id=creator_id,
            partner_id=partnership.other_member(creator_id),
            title=title,
            description=description,
            category=category,
            deadline=deadline,
            support_style=support_style,
            accountability={
                "verification_required": rules.get("verification_required", True),
                "reminder_enabled": True,
                **(accountability or {}),
            },
            progress=empty_progress(),
            is_completed=False,
            is_shared=True,
        )
        logger.info(f"Shared goal {goal.id} created in partnership {partnership_id} by {creator_id}")

        await self._bump_metrics(
            partnership,
            total_shared_goals=(partnership.metrics or {}).get("total_shared_goals", 0) + 1,
        )
        await self.notifier.goal_shared(partnership_id, creator_id, goal.partner_id, goal.title, goal.id)
        return OperationResult.ok(goal, "Shared goal created")

    @wraps_store_errors("load shared goal")
    async def get_goal(self, goal_id: str) -> Optional[SharedGoal]:
        return await self.goals.get_by_id(goal_id)

    @wraps_store_errors("list partnership goals")
    async def list_partnership_goals(self, partnership_id: str) -> Sequence[SharedGoal]:
        return await self.goals.get_by_partnership(partnership_id)

    @wraps_store_errors("list user goals")
    async def list_user_goals(self, user_id: str) -> Sequence[SharedGoal]:
        return await self.goals.get_by_user(user_id)

    @guarded_operation("update shared goal")
    async def update_goal(self, goal_id: str, user_id: str, data: dict[str, Any]) -> OperationResult[SharedGoal]:
        """Owner-only edit of descriptive fields. Progress is never touched here."""
        goal = await self._load_goal(goal_id)
        if goal.owner_id != user_id:
            raise UnauthorizedError("Only the goal owner can edit it")

        fields = {k: v for k, v in data.items() if k in GOAL_EDITABLE_FIELDS}
        goal = await self.goals.apply(goal, **fields)
        return OperationResult.ok(goal, "Shared goal updated")

    @guarded_operation("toggle goal completion")
    async def toggle_goal_completion(self, goal_id: str, user_id: str) -> OperationResult[SharedGoal]:
        goal = await self._load_goal(goal_id)
        if not goal.is_participant(user_id):
            raise UnauthorizedError("Only partnership members can complete this goal")

        goal = await self.goals.apply(goal, is_completed=not goal.is_completed)
        logger.info(f"Goal {goal_id} is_completed={goal.is_completed} (by {user_id})")
        return OperationResult.ok(goal, "Goal completed" if goal.is_completed else "Goal reopened")

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    @guarded_operation("create task")
    async def create_task(
        self,
        goal_id: str,
        creator_id: str,
        title: str,
        description: Optional[str] = None,
        priority: str = TaskPriority.MEDIUM.value,
        estimated_time: Optional[str] = None,
        tags: Optional[list[str]] = None,
        due_date: Optional[datetime] = None,
        verification_required: Optional[bool] = None,
    ) -> OperationResult[PartnerTask]:
        """Create a task owned by creator_id; the other goal member verifies it."""
        goal = await self._load_goal(goal_id)
        if not goal.is_participant(creator_id):
            raise UnauthorizedError("Only goal participants can add tasks")

        if verification_required is None:
            verification_required = bool((goal.accountability or {}).get("verification_required", True))

        task = await self.tasks.create(
            shared_goal_id=goal.id,
            partnership_id=goal.partnership_id,
            owner_id=creator_id,
            partner_id=goal.partner_id if creator_id == goal.owner_id else goal.owner_id,
            title=title,
            description=description,
            priority=parse_choice(TaskPriority, priority, "priority").value,
            estimated_time=estimated_time,
            tags=list(tags or []),
            due_date=due_date,
            status=TaskStatus.PENDING.value,
            verification_status=VerificationStatus.NOT_REQUIRED.value,
            verification_required=verification_required,
            verification_history=[],
        )
        logger.info(f"Task {task.id} created under goal {goal.id} by {creator_id}")

        await self._recompute(goal)
        return OperationResult.ok(task, "Task created")

    @wraps_store_errors("load task")
    async def get_task(self, task_id: str) -> Optional[PartnerTask]:
        return await self.tasks.get_by_id(task_id)

    @wraps_store_errors("list goal tasks")
    async def list_goal_tasks(self, goal_id: str) -> Sequence[PartnerTask]:
        return await self.tasks.get_by_goal(goal_id)

    @wraps_store_errors("list partnership tasks")
    async def list_partnership_tasks(self, partnership_id: str) -> Sequence[PartnerTask]:
        return await self.tasks.get_by_partnership(partnership_id)

    @wraps_store_errors("list pending verifications")
    async def list_pending_verification(self, user_id: str) -> Sequence[PartnerTask]:
        """Tasks waiting for user_id's verdict, oldest submission first."""
        return await self.tasks.get_pending_verification(user_id)

    @guarded_operation("start task")
    async def start_task(self, task_id: str, user_id: str) -> OperationResult[PartnerTask]:
        task = await self._load_task(task_id)
        if task.owner_id != user_id:
            raise UnauthorizedError("Only the task owner can start it")
        if task.status != TaskStatus.PENDING.value:
            raise PreconditionError(
                ErrorCode.INVALID_TRANSITION,
                f"Cannot start a task that is {task.status}",
            )

        now = utcnow()
        task = await self.tasks.apply(
            task,
            status=TaskStatus.IN_PROGRESS.value,
            started_at=now,
            verification_history=self._append_history(task, HistoryAction.STARTED, user_id, now),
        )
        await self._recompute_for(task)
        return OperationResult.ok(task, "Task started")

    @guarded_operation("mark task as done")
    async def mark_as_done(
        self,
        task_id: str,
        user_id: str,
        evidence: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> OperationResult[PartnerTask]:
        """
        Owner marks a task as done.

        Without required verification the task is verified immediately;
        otherwise it waits for the partner's verdict.
        """
        task = await self._load_task(task_id)
        if task.owner_id != user_id:
            raise UnauthorizedError("Only the task owner can mark it as done")
        if task.status not in DONE_SOURCES:
            raise PreconditionError(
                ErrorCode.INVALID_TRANSITION,
                f"Cannot mark a task as done while it is {task.status}",
            )

        now = utcnow()
        fields: dict[str, Any] = {
            "marked_done_at": now,
            "verification_history": self._append_history(task, HistoryAction.MARKED_DONE, user_id, now, comment),
        }
        if evidence is not None:
            fields["verification_evidence"] = evidence
        if task.verification_required:
            fields["status"] = TaskStatus.MARKED_DONE.value
            fields["verification_status"] = VerificationStatus.PENDING.value
        else:
            fields["status"] = TaskStatus.VERIFIED.value
            fields["verification_status"] = VerificationStatus.APPROVED.value
            fields["verified_at"] = now

        task = await self.tasks.apply(task, **fields)
        logger.info(f"Task {task_id} marked done by {user_id} -> {task.status}")

        await self._recompute_for(task)
        if task.verification_required:
            await self.notifier.verification_request(task.partnership_id, user_id, task.partner_id, task.title, task.id)
        else:
            await self.notifier.task_completed(task.partnership_id, user_id, task.partner_id, task.title, task.id)

        message = "Task submitted for verification" if task.verification_required else "Task completed"
        return OperationResult.ok(task, message)

    @guarded_operation("verify task")
    async def verify(
        self,
        task_id: str,
        action: str,
        verifier_id: str,
        comment: Optional[str] = None,
    ) -> OperationResult[PartnerTask]:
        """
        Partner's verdict on a task waiting for verification.

        Args:
            task_id: Task to verify
            action: approve, reject or request_redo
            verifier_id: Must be the task's partner
            comment: Optional feedback for the owner
        """
        verdict = parse_choice(VerificationAction, action, "verification action")

        task = await self._load_task(task_id)
        if task.partner_id != verifier_id:
            raise UnauthorizedError("Only the accountability partner can verify this task")
        if (
            task.status != TaskStatus.MARKED_DONE.value
            or task.verification_status != VerificationStatus.PENDING.value
        ):
            raise PreconditionError(
                ErrorCode.INVALID_TRANSITION,
                f"Task is {task.status}/{task.verification_status}, not waiting for verification",
            )

        status, verification_status, history_action, notification_type = VERDICTS[verdict]
        now = utcnow()
        fields: dict[str, Any] = {
            "status": status.value,
            "verification_status": verification_status.value,
            "verification_comment": comment,
            "verification_history": self._append_history(task, history_action, verifier_id, now, comment),
        }
        if verdict == VerificationAction.APPROVE:
            fields["verified_at"] = now

        submitted_at = task.marked_done_at
        task = await self.tasks.apply(task, **fields)
        logger.info(f"Task {task_id} {verdict.value} by {verifier_id} -> {task.status}")

        await self._recompute_for(task)
        if verdict == VerificationAction.APPROVE:
            await self._record_verification(task.partnership_id, submitted_at, now)
        await self.notifier.verification_result(
            task.partnership_id,
            verifier_id,
            task.owner_id,
            task.title,
            task.id,
            notification_type,
            comment,
        )
        return OperationResult.ok(task, f"Task {verdict.value.replace('_', ' ')} recorded")

    # ------------------------------------------------------------------
    # Progress and stats
    # ------------------------------------------------------------------

    @wraps_store_errors("recompute goal progress")
    async def recompute_goal_progress(self, goal_id: str) -> Optional[dict]:
        """Rebuild a goal's progress from its tasks. Returns None for an unknown goal."""
        goal = await self.goals.get_by_id(goal_id)
        if goal is None:
            return None
        goal = await self._recompute(goal)
        return dict(goal.progress)

    @wraps_store_errors("load partnership stats")
    async def get_partnership_stats(self, partnership_id: str) -> Optional[PartnershipStats]:
        if await self.partnerships.get_by_id(partnership_id) is None:
            return None

        goals = await self.goals.get_by_partnership(partnership_id)
        tasks = await self.tasks.get_by_partnership(partnership_id)
        completed = sum(1 for t in tasks if t.status == TaskStatus.VERIFIED.value)
        pending = sum(
            1 for t in tasks
            if t.status == TaskStatus.MARKED_DONE.value
            and t.verification_status == VerificationStatus.PENDING.value
        )
        return PartnershipStats(
            total_goals=len(goals),
            completed_goals=sum(1 for g in goals if g.is_completed),
            total_tasks=len(tasks),
            completed_tasks=completed,
            pending_verifications=pending,
            completion_rate=completion_rate(completed, len(tasks)),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_partnership(self, partnership_id: str) -> Partnership:
        partnership = await self.partnerships.get_by_id(partnership_id)
        if partnership is None:
            raise NotFoundError(f"Partnership {partnership_id} not found")
        return partnership

    async def _load_goal(self, goal_id: str) -> SharedGoal:
        goal = await self.goals.get_by_id(goal_id)
        if goal is None:
            raise NotFoundError(f"Shared goal {goal_id} not found")
        return goal

    async def _load_task(self, task_id: str) -> PartnerTask:
        task = await self.tasks.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    @staticmethod
    def _append_history(
        task: PartnerTask,
        action: HistoryAction,
        by: str,
        at: datetime,
        comment: Optional[str] = None,
    ) -> list:
        # New list so the JSON column sees the change
        return list(task.verification_history or []) + [history_entry(action, by, at, comment)]

    async def _recompute_for(self, task: PartnerTask) -> None:
        goal = await self.goals.get_by_id(task.shared_goal_id)
        if goal is not None:
            await self._recompute(goal)

    async def _recompute(self, goal: SharedGoal) -> SharedGoal:
        """Full re-scan of the goal's tasks. Writes only when a counter changed."""
        tasks = await self.tasks.get_by_goal(goal.id)
        verified = sum(1 for t in tasks if t.status == TaskStatus.VERIFIED.value)
        current = goal.progress or {}
        counters = {
            "total_tasks": len(tasks),
            "completed_tasks": verified,
            "verified_tasks": verified,
        }
        if all(current.get(k) == v for k, v in counters.items()):
            return goal
        progress = {**counters, "last_updated": utcnow().isoformat()}
        return await self.goals.apply(goal, progress=progress)

    async def _bump_metrics(self, partnership: Partnership, **changes) -> Partnership:
        now = utcnow()
        metrics = {**(partnership.metrics or initial_metrics(now)), **changes}
        metrics["last_interaction"] = now.isoformat()
        return await self.partnerships.apply(partnership, metrics=metrics)

    async def _record_verification(
        self,
        partnership_id: str,
        submitted_at: Optional[datetime],
        verified_at: datetime,
    ) -> None:
        """Count an approval and fold its turnaround into the running average."""
        partnership = await self.partnerships.get_by_id(partnership_id)
        if partnership is None:
            return
        metrics = partnership.metrics or {}
        count = metrics.get("total_tasks_verified", 0)
        average = metrics.get("average_verification_time_hours", 0.0)
        hours = (verified_at - submitted_at).total_seconds() / 3600 if submitted_at else 0.0
        await self._bump_metrics(
            partnership,
            total_tasks_verified=count + 1,
            average_verification_time_hours=round((average * count + hours) / (count + 1), 2),
        )
