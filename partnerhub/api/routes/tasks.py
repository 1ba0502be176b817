"""
Partner Tasks API Routes.

Task transitions: the owner starts and completes, the partner verifies.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from partnerhub.services.shared_goals import SharedGoalService
from ..deps import current_user_id, get_goal_service, raise_for_result
from ..schemas.goals import MarkDoneRequest, TaskResponse, VerifyRequest

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/pending-verification", response_model=list[TaskResponse])
async def list_pending_verification(
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> list[TaskResponse]:
    """Tasks waiting for the acting user's verdict, oldest first."""
    return [TaskResponse.model_validate(t) for t in await service.list_pending_verification(user_id)]


@router.get("/partnership/{partnership_id}", response_model=list[TaskResponse])
async def list_partnership_tasks(
    partnership_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> list[TaskResponse]:
    return [TaskResponse.model_validate(t) for t in await service.list_partnership_tasks(partnership_id)]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> TaskResponse:
    task = await service.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse.model_validate(task)


@router.post("/{task_id}/start", response_model=TaskResponse)
async def start_task(
    task_id: str,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> TaskResponse:
    result = await service.start_task(task_id, user_id)
    raise_for_result(result)
    return TaskResponse.model_validate(result.data)


@router.post("/{task_id}/done", response_model=TaskResponse)
async def mark_task_done(
    task_id: str,
    data: Optional[MarkDoneRequest] = None,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> TaskResponse:
    data = data or MarkDoneRequest()
    result = await service.mark_as_done(task_id, user_id, evidence=data.evidence, comment=data.comment)
    raise_for_result(result)
    return TaskResponse.model_validate(result.data)


@router.post("/{task_id}/verify", response_model=TaskResponse)
async def verify_task(
    task_id: str,
    data: VerifyRequest,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> TaskResponse:
    result = await service.verify(task_id, data.action.value, user_id, data.comment)
    raise_for_result(result)
    return TaskResponse.model_validate(result.data)
