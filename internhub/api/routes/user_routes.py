"""
User Routes

GET /user - Current user with profile and applications
GET /profile - Current user's profile
PUT /profile - Create or update the profile
"""

from fastapi import APIRouter, Depends, HTTPException

from internhub.core.auth import get_current_user, get_token_payload
from internhub.services.application_service import get_application_service
from internhub.services.profile_service import get_profile_service
from internhub.services.user_service import get_user_service, public_user
from internhub.schemas.schemas import MeResponse, ProfileResponse, ProfileUpdate

router = APIRouter(tags=["Users"])


@router.get("/user", response_model=MeResponse)
async def get_me(payload: dict = Depends(get_token_payload)):
    """
    The signed-in user, their profile and their applications.

    Accounts known only to the identity provider get a local student
    record on first visit.
    """
    users = get_user_service()
    user = users.find_by_email(payload["email"])
    if user is None:
        user = users.provision_external_user(
            payload["email"], name=payload.get("name"), image=payload.get("picture")
        )

    return MeResponse(
        user=public_user(user),
        profile=get_profile_service().get_by_user(user["id"]),
        applications=get_application_service().list_own(user),
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(user: dict = Depends(get_current_user)):
    profile = get_profile_service().get_by_user(user["id"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(update: ProfileUpdate, user: dict = Depends(get_current_user)):
    """Update only the fields that were sent; creates the profile on first save."""
    return get_profile_service().upsert(user["id"], update.model_dump(exclude_unset=True))
