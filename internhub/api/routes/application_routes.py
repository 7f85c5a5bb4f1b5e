"""
Application Routes

GET /applications - Applications visible to the caller
POST /applications - Apply to an internship (student only)
GET /applications/check - Has the caller applied to an internship?
GET /applications/debug - The caller's applications per store
GET /applications/{application_id} - Application details
PUT /applications/{application_id} - Change application status
DELETE /applications/{application_id} - Withdraw an application
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from internhub.core.auth import get_current_student, get_current_user
from internhub.services.application_service import get_application_service
from internhub.schemas.schemas import (
    ApplicationCheckResponse, ApplicationCreate, ApplicationResponse,
    ApplicationStatusUpdate, DebugApplicationsResponse
)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    internship_id: Optional[str] = Query(None),
    user: dict = Depends(get_current_user)
):
    """
    Students see their own applications, admins those to their company's
    internships and superadmins all of them.
    """
    return get_application_service().list_for(user, internship_id=internship_id)


@router.post("", response_model=ApplicationResponse, status_code=201)
async def create_application(application: ApplicationCreate, user: dict = Depends(get_current_student)):
    return get_application_service().create(user, application.model_dump())


@router.get("/check", response_model=ApplicationCheckResponse)
async def check_application(
    internship_id: str = Query(..., description="Internship to check"),
    user: dict = Depends(get_current_user)
):
    return get_application_service().check(user, internship_id)


@router.get("/debug", response_model=DebugApplicationsResponse)
async def debug_applications(user: dict = Depends(get_current_user)):
    return get_application_service().debug(user)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: str, user: dict = Depends(get_current_user)):
    return get_application_service().get_for(application_id, user)


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    user: dict = Depends(get_current_user)
):
    return get_application_service().update_status(application_id, update.status.value, user)


@router.delete("/{application_id}", response_model=ApplicationResponse)
async def withdraw_application(application_id: str, user: dict = Depends(get_current_user)):
    return get_application_service().withdraw(application_id, user)
