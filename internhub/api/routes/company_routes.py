"""
Company Routes

GET /companies - List companies with filters
POST /companies - Create a company (admin / superadmin)
GET /companies/{company_id} - Company details
PATCH /companies/{company_id}/status - Moderate a company (superadmin)
POST /companies/{company_id}/favorite - Toggle favorite
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from internhub.core.auth import (
    get_current_admin, get_current_superadmin, get_current_user, get_optional_user
)
from internhub.services.company_service import get_company_service
from internhub.schemas.schemas import (
    CompanyCreate, CompanyResponse, CompanyStatusUpdate, ToggleResponse
)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    search: Optional[str] = Query(None, description="Search in name, description and industry"),
    industry: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    viewer: Optional[dict] = Depends(get_optional_user)
):
    return get_company_service().list(
        search=search or "", industry=industry or "", location=location or "", viewer=viewer
    )


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(company: CompanyCreate, user: dict = Depends(get_current_admin)):
    """Create a company. It starts as pending until a superadmin approves it."""
    return get_company_service().create(company.model_dump(), user)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: str):
    return get_company_service().get(company_id)


@router.patch("/{company_id}/status", response_model=CompanyResponse)
async def set_company_status(
    company_id: str,
    update: CompanyStatusUpdate,
    user: dict = Depends(get_current_superadmin)
):
    return get_company_service().set_status(company_id, update.status.value, user)


@router.post("/{company_id}/favorite", response_model=ToggleResponse)
async def toggle_favorite(company_id: str, user: dict = Depends(get_current_user)):
    favorited = get_company_service().toggle_favorite(company_id, user)
    message = "Company added to favorites" if favorited else "Company removed from favorites"
    return ToggleResponse(message=message, active=favorited)
