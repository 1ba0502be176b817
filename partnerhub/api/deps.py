"""
Shared FastAPI dependencies.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from partnerhub.config import Settings
from partnerhub.infra.db.session import get_db
from partnerhub.services.errors import ErrorCode
from partnerhub.services.experts import ExpertService
from partnerhub.services.matching import MatchingService
from partnerhub.services.notifications import NotificationOutbox
from partnerhub.services.partnerships import PartnershipService
from partnerhub.services.preferences import PreferenceStore
from partnerhub.services.results import OperationResult
from partnerhub.services.shared_goals import SharedGoalService

# Error code -> HTTP status; anything not listed is a state conflict
STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.NOT_AUTHORIZED: 403,
    ErrorCode.INVALID_INPUT: 422,
    ErrorCode.OPERATION_FAILED: 500,
}


def status_for(code: Optional[ErrorCode]) -> int:
    if code is None:
        return 400
    return STATUS_BY_CODE.get(code, 409)


def raise_for_result(result: OperationResult) -> None:
    """Turn a failed OperationResult into an HTTPException."""
    if result.success:
        return
    raise HTTPException(
        status_code=status_for(result.error_code),
        detail={
            "message": result.message,
            "error_code": result.error_code.value if result.error_code else None,
        },
    )


async def current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """The acting user. Authentication happens in front of this service."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    return x_user_id


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_preference_store(db: AsyncSession = Depends(get_db)) -> PreferenceStore:
    return PreferenceStore(db)


def get_expert_service(db: AsyncSession = Depends(get_db)) -> ExpertService:
    return ExpertService(db)


def get_partnership_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PartnershipService:
    return PartnershipService(db, settings=settings)


def get_matching_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> MatchingService:
    return MatchingService(db, settings=settings)


def get_goal_service(db: AsyncSession = Depends(get_db)) -> SharedGoalService:
    return SharedGoalService(db)


def get_outbox(db: AsyncSession = Depends(get_db)) -> NotificationOutbox:
    return NotificationOutbox(db)
