"""
Preferences API Routes.

Endpoints for reading and saving the acting user's matching preferences.
"""
from fastapi import APIRouter, Depends, HTTPException

from partnerhub.services.preferences import PreferenceStore
from ..deps import current_user_id, get_preference_store
from ..schemas.preferences import AvailabilityUpdate, PreferencesResponse, PreferencesUpsert

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("/me", response_model=PreferencesResponse)
async def get_my_preferences(
    user_id: str = Depends(current_user_id),
    store: PreferenceStore = Depends(get_preference_store),
) -> PreferencesResponse:
    prefs = await store.get(user_id)
    if prefs is None:
        raise HTTPException(status_code=404, detail="No partnership preferences saved")
    return PreferencesResponse.model_validate(prefs)


@router.put("/me", response_model=PreferencesResponse)
async def save_my_preferences(
    data: PreferencesUpsert,
    user_id: str = Depends(current_user_id),
    store: PreferenceStore = Depends(get_preference_store),
) -> PreferencesResponse:
    """Create or update preferences. New records start available for matching."""
    prefs = await store.upsert(user_id, data.model_dump(mode="json"))
    return PreferencesResponse.model_validate(prefs)


@router.put("/me/availability", response_model=PreferencesResponse)
async def set_my_availability(
    data: AvailabilityUpdate,
    user_id: str = Depends(current_user_id),
    store: PreferenceStore = Depends(get_preference_store),
) -> PreferencesResponse:
    if not await store.set_availability(user_id, data.available):
        raise HTTPException(status_code=404, detail="No partnership preferences saved")
    return PreferencesResponse.model_validate(await store.get(user_id))


@router.get("/{user_id}", response_model=PreferencesResponse)
async def get_preferences(
    user_id: str,
    store: PreferenceStore = Depends(get_preference_store),
) -> PreferencesResponse:
    prefs = await store.get(user_id)
    if prefs is None:
        raise HTTPException(status_code=404, detail="Preferences not found")
    return PreferencesResponse.model_validate(prefs)
