"""
Shared Goals API Routes.
"""
from fastapi import APIRouter, Depends, HTTPException

from partnerhub.services.shared_goals import SharedGoalService
from ..deps import current_user_id, get_goal_service, raise_for_result
from ..schemas.goals import GoalCreate, GoalResponse, GoalUpdate, TaskCreate, TaskResponse

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalResponse, status_code=201)
async def create_goal(
    data: GoalCreate,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> GoalResponse:
    """Create a goal in an active partnership; the other member becomes its verifier."""
    result = await service.create_goal(
        data.partnership_id,
        user_id,
        title=data.title,
        category=data.category,
        description=data.description,
        deadline=data.deadline,
        support_style=data.support_style,
        accountability=data.accountability,
    )
    raise_for_result(result)
    return GoalResponse.model_validate(result.data)


@router.get("/me", response_model=list[GoalResponse])
async def list_my_goals(
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> list[GoalResponse]:
    return [GoalResponse.model_validate(g) for g in await service.list_user_goals(user_id)]


@router.get("/partnership/{partnership_id}", response_model=list[GoalResponse])
async def list_partnership_goals(
    partnership_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> list[GoalResponse]:
    return [GoalResponse.model_validate(g) for g in await service.list_partnership_goals(partnership_id)]


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal(
    goal_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> GoalResponse:
    goal = await service.get_goal(goal_id)
    if goal is None:
        raise HTTPException(status_code=404, detail="Shared goal not found")
    return GoalResponse.model_validate(goal)


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: str,
    data: GoalUpdate,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> GoalResponse:
    result = await service.update_goal(goal_id, user_id, data.model_dump(exclude_unset=True))
    raise_for_result(result)
    return GoalResponse.model_validate(result.data)


@router.post("/{goal_id}/toggle-completion", response_model=GoalResponse)
async def toggle_goal_completion(
    goal_id: str,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> GoalResponse:
    result = await service.toggle_goal_completion(goal_id, user_id)
    raise_for_result(result)
    return GoalResponse.model_validate(result.data)


@router.post("/{goal_id}/recompute", response_model=GoalResponse)
async def recompute_goal_progress(
    goal_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> GoalResponse:
    """Rebuild the goal's progress counters from its tasks."""
    if await service.recompute_goal_progress(goal_id) is None:
        raise HTTPException(status_code=404, detail="Shared goal not found")
    return GoalResponse.model_validate(await service.get_goal(goal_id))


@router.get("/{goal_id}/tasks", response_model=list[TaskResponse])
async def list_goal_tasks(
    goal_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> list[TaskResponse]:
    return [TaskResponse.model_validate(t) for t in await service.list_goal_tasks(goal_id)]


@router.post("/{goal_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    goal_id: str,
    data: TaskCreate,
    user_id: str = Depends(current_user_id),
    service: SharedGoalService = Depends(get_goal_service),
) -> TaskResponse:
    result = await service.create_task(
        goal_id,
        user_id,
        title=data.title,
        description=data.description,
        priority=data.priority.value,
        estimated_time=data.estimated_time,
        tags=data.tags,
        due_date=data.due_date,
        verification_required=data.verification_required,
    )
    raise_for_result(result)
    return TaskResponse.model_validate(result.data)
