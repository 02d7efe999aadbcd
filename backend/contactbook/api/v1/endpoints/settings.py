"""
App preferences (theme).
"""

from fastapi import APIRouter, Depends

from contactbook.core.preferences import PreferenceStore, get_preferences
from contactbook.schemas.common import ThemePreference

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/theme", response_model=ThemePreference)
async def get_theme(preferences: PreferenceStore = Depends(get_preferences)):
    return ThemePreference(theme=preferences.theme)


@router.put("/theme", response_model=ThemePreference)
async def set_theme(
    body: ThemePreference,
    preferences: PreferenceStore = Depends(get_preferences),
):
    return ThemePreference(theme=preferences.set_theme(body.theme))
