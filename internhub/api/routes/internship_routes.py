"""
Internship Routes

GET /internships - List open internships with filters
POST /internships - Post an internship (company owner / superadmin)
GET /internships/{internship_id} - Internship details
PUT /internships/{internship_id} - Replace an internship
PATCH /internships/{internship_id} - Partially update an internship
DELETE /internships/{internship_id} - Delete an internship
POST /internships/{internship_id}/bookmark - Toggle bookmark
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional

from internhub.core.auth import get_current_admin, get_current_user, get_optional_user
from internhub.services.internship_service import get_internship_service
from internhub.schemas.schemas import (
    InternshipCreate, InternshipResponse, InternshipUpdate, LocationType,
    MessageResponse, ToggleResponse
)

router = APIRouter(prefix="/internships", tags=["Internships"])


@router.get("", response_model=List[InternshipResponse])
async def list_internships(
    search: Optional[str] = Query(None, description="Search in title, description and company name"),
    location: Optional[str] = Query(None),
    type: Optional[LocationType] = Query(None, description="Location type"),
    company_id: Optional[str] = Query(None),
    viewer: Optional[dict] = Depends(get_optional_user)
):
    """List open internships, newest first."""
    return get_internship_service().list(
        search=search or "",
        location=location or "",
        type=type.value if type else "",
        company_id=company_id or "",
        viewer=viewer,
    )


@router.post("", response_model=InternshipResponse, status_code=201)
async def create_internship(internship: InternshipCreate, user: dict = Depends(get_current_admin)):
    """Post a new internship for a company the caller owns."""
    return get_internship_service().create(internship.model_dump(), user)


@router.get("/{internship_id}", response_model=InternshipResponse)
async def get_internship(internship_id: str, viewer: Optional[dict] = Depends(get_optional_user)):
    service = get_internship_service()
    return service.enrich([service.get(internship_id)], viewer)[0]


@router.put("/{internship_id}", response_model=InternshipResponse)
async def replace_internship(
    internship_id: str,
    internship: InternshipCreate,
    user: dict = Depends(get_current_admin)
):
    """Full update. The company of a posting cannot change."""
    service = get_internship_service()
    current = service.get(internship_id)
    if internship.company_id != current["company_id"]:
        raise HTTPException(status_code=400, detail="An internship cannot be moved to another company")
    return service.update(internship_id, internship.model_dump(exclude={"company_id"}), user)


@router.patch("/{internship_id}", response_model=InternshipResponse)
async def update_internship(
    internship_id: str,
    update: InternshipUpdate,
    user: dict = Depends(get_current_admin)
):
    """Partial update; only the fields sent are changed."""
    return get_internship_service().update(internship_id, update.model_dump(exclude_unset=True), user)


@router.delete("/{internship_id}", response_model=MessageResponse)
async def delete_internship(internship_id: str, user: dict = Depends(get_current_admin)):
    get_internship_service().delete(internship_id, user)
    return MessageResponse(message="Internship deleted")


@router.post("/{internship_id}/bookmark", response_model=ToggleResponse)
async def toggle_bookmark(internship_id: str, user: dict = Depends(get_current_user)):
    bookmarked = get_internship_service().toggle_bookmark(internship_id, user)
    message = "Internship bookmarked" if bookmarked else "Bookmark removed"
    return ToggleResponse(message=message, active=bookmarked)
