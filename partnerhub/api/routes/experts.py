"""
Experts API Routes.

Expert profile CRUD. An expert manages their own profile through /me.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from partnerhub.services.experts import ExpertService
from ..deps import current_user_id, get_expert_service
from ..schemas.experts import ExpertCreate, ExpertResponse, ExpertUpdate

router = APIRouter(prefix="/experts", tags=["experts"])


@router.get("", response_model=list[ExpertResponse])
async def list_experts(
    category: Optional[str] = Query(None, description="Only experts covering this category"),
    service: ExpertService = Depends(get_expert_service),
) -> list[ExpertResponse]:
    """Experts open for matching, best rated first."""
    if category:
        experts = await service.list_by_category(category)
    else:
        experts = await service.list_available()
    return [ExpertResponse.model_validate(e) for e in experts]


@router.post("/me", response_model=ExpertResponse, status_code=201)
async def create_my_profile(
    data: ExpertCreate,
    user_id: str = Depends(current_user_id),
    service: ExpertService = Depends(get_expert_service),
) -> ExpertResponse:
    expert = await service.create(user_id, data.model_dump(mode="json"))
    return ExpertResponse.model_validate(expert)


@router.patch("/me", response_model=ExpertResponse)
async def update_my_profile(
    data: ExpertUpdate,
    user_id: str = Depends(current_user_id),
    service: ExpertService = Depends(get_expert_service),
) -> ExpertResponse:
    expert = await service.update(user_id, data.model_dump(mode="json", exclude_unset=True))
    if expert is None:
        raise HTTPException(status_code=404, detail="Expert profile not found")
    return ExpertResponse.model_validate(expert)


@router.delete("/me")
async def delete_my_profile(
    user_id: str = Depends(current_user_id),
    service: ExpertService = Depends(get_expert_service),
) -> dict:
    if not await service.delete(user_id):
        raise HTTPException(status_code=404, detail="Expert profile not found")
    return {"status": "deleted", "user_id": user_id}


@router.get("/{user_id}", response_model=ExpertResponse)
async def get_expert(
    user_id: str,
    service: ExpertService = Depends(get_expert_service),
) -> ExpertResponse:
    expert = await service.get(user_id)
    if expert is None:
        raise HTTPException(status_code=404, detail="Expert profile not found")
    return ExpertResponse.model_validate(expert)
