"""
Partnerships API Routes.

Manual requests and lifecycle transitions. Every transition is restricted
to the two members of the partnership.
"""
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from partnerhub.services.matching import MatchingService
from partnerhub.services.partnerships import PartnershipService
from partnerhub.services.shared_goals import SharedGoalService
from ..deps import (
    current_user_id,
    get_goal_service,
    get_matching_service,
    get_partnership_service,
    raise_for_result,
)
from ..schemas.partnerships import (
    EndPartnershipRequest,
    InsightsResponse,
    PartnershipRequest,
    PartnershipResponse,
    PartnershipStatsResponse,
)

router = APIRouter(prefix="/partnerships", tags=["partnerships"])


@router.post("", response_model=PartnershipResponse, status_code=201)
async def request_partnership(
    data: PartnershipRequest,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    """Invite a specific user. The partnership stays pending until they accept."""
    result = await service.request_specific(user_id, data.partner_id, data.partnership_type.value)
    raise_for_result(result)
    return PartnershipResponse.model_validate(result.data)


@router.get("/me", response_model=Optional[PartnershipResponse])
async def get_my_partnership(
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> Optional[PartnershipResponse]:
    """The acting user's active or pending partnership, or null."""
    partnership = await service.get_for_user(user_id)
    return PartnershipResponse.model_validate(partnership) if partnership else None


@router.get("/me/history", response_model=list[PartnershipResponse])
async def get_my_partnership_history(
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> list[PartnershipResponse]:
    return [PartnershipResponse.model_validate(p) for p in await service.list_for_user(user_id)]


@router.get("/{partnership_id}", response_model=PartnershipResponse)
async def get_partnership(
    partnership_id: str,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    partnership = await service.get(partnership_id)
    if partnership is None:
        raise HTTPException(status_code=404, detail="Partnership not found")
    if not partnership.is_participant(user_id):
        raise HTTPException(status_code=403, detail="Not a member of this partnership")
    return PartnershipResponse.model_validate(partnership)


@router.post("/{partnership_id}/accept", response_model=PartnershipResponse)
async def accept_partnership(
    partnership_id: str,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    result = await service.accept(partnership_id, user_id)
    raise_for_result(result)
    return PartnershipResponse.model_validate(result.data)


@router.post("/{partnership_id}/decline", response_model=PartnershipResponse)
async def decline_partnership(
    partnership_id: str,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    result = await service.decline(partnership_id, user_id)
    raise_for_result(result)
    return PartnershipResponse.model_validate(result.data)


@router.post("/{partnership_id}/pause", response_model=PartnershipResponse)
async def pause_partnership(
    partnership_id: str,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    result = await service.pause(partnership_id, user_id)
    raise_for_result(result)
    return PartnershipResponse.model_validate(result.data)


@router.post("/{partnership_id}/resume", response_model=PartnershipResponse)
async def resume_partnership(
    partnership_id: str,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    result = await service.resume(partnership_id, user_id)
    raise_for_result(result)
    return PartnershipResponse.model_validate(result.data)


@router.post("/{partnership_id}/end", response_model=PartnershipResponse)
async def end_partnership(
    partnership_id: str,
    data: Optional[EndPartnershipRequest] = None,
    user_id: str = Depends(current_user_id),
    service: PartnershipService = Depends(get_partnership_service),
) -> PartnershipResponse:
    """End the partnership; both members become available for matching again."""
    result = await service.end(partnership_id, user_id, data.reason if data else None)
    raise_for_result(result)
    return PartnershipResponse.model_validate(result.data)


@router.get("/{partnership_id}/insights", response_model=InsightsResponse)
async def get_insights(
    partnership_id: str,
    service: MatchingService = Depends(get_matching_service),
) -> InsightsResponse:
    insights = await service.insights(partnership_id)
    if insights is None:
        raise HTTPException(status_code=404, detail="Partnership or member preferences not found")
    return InsightsResponse(**asdict(insights))


@router.get("/{partnership_id}/stats", response_model=PartnershipStatsResponse)
async def get_stats(
    partnership_id: str,
    service: SharedGoalService = Depends(get_goal_service),
) -> PartnershipStatsResponse:
    stats = await service.get_partnership_stats(partnership_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="Partnership not found")
    return PartnershipStatsResponse(**asdict(stats))
