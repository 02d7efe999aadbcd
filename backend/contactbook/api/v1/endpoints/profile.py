"""
Profile endpoints: display name and avatar of the signed-in user.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from contactbook.core.security import get_current_user
from contactbook.models.session import AuthUser
from contactbook.schemas.profile import ProfileResponse, ProfileUpdate
from contactbook.services.profile_service import ProfileService, get_profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = await profiles.get()
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return ProfileResponse.model_validate(profile)


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = await profiles.update(body.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)


@router.post("/avatar", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Replace the avatar with an uploaded image (max 5MB)."""
    data = await file.read()
    profile = await profiles.upload_avatar(file.filename, file.content_type, data)
    logger.info("Avatar updated for user %s", current_user.id)
    return ProfileResponse.model_validate(profile)


@router.delete("/avatar", response_model=ProfileResponse)
async def remove_avatar(
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = await profiles.remove_avatar()
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return ProfileResponse.model_validate(profile)
