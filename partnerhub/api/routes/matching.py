"""
Matching API Routes.

Automatic matching and manual partner search.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from partnerhub.matching.finder import SearchFilters
from partnerhub.services.matching import MatchingService
from ..deps import current_user_id, get_matching_service, raise_for_result
from ..schemas.partnerships import CandidateResponse, MatchResponse, PartnershipResponse

router = APIRouter(prefix="/matching", tags=["matching"])


@router.post("/find", response_model=MatchResponse)
async def find_partner(
    user_id: str = Depends(current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> MatchResponse:
    """Match the acting user with an expert or peer and start the partnership."""
    result = await service.find_and_create_partnership(user_id)
    raise_for_result(result)
    return MatchResponse(
        message=result.message,
        partnership=PartnershipResponse.model_validate(result.data),
    )


@router.get("/search", response_model=list[CandidateResponse])
async def search_partners(
    category: Optional[str] = Query(None),
    support_style: Optional[str] = Query(None),
    time_commitment: Optional[str] = Query(None),
    partner_type: Optional[str] = Query(None),
    experience_level: Optional[str] = Query(None),
    user_id: str = Depends(current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> list[CandidateResponse]:
    """Browse compatible users, best score first."""
    filters = SearchFilters(
        category=category,
        support_style=support_style,
        time_commitment=time_commitment,
        partner_type=partner_type,
        experience_level=experience_level,
    )
    ranked = await service.search(user_id, filters)
    return [
        CandidateResponse(
            user_id=c.profile.user_id,
            compatibility=c.score,
            preferred_partner_type=c.profile.preferred_partner_type,
            support_style=c.profile.support_style,
            available_categories=c.profile.available_categories,
            time_commitment=c.profile.time_commitment,
            experience_level=c.profile.experience_level,
            timezone=c.profile.timezone,
            bio=c.profile.bio,
        )
        for c in ranked
    ]
