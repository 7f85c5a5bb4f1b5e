"""
Resource Routes

GET /resources - Learning resources, optionally by category
"""

from fastapi import APIRouter, Query
from typing import List, Optional

from internhub.services.resource_service import get_resource_service
from internhub.schemas.schemas import ResourceResponse

router = APIRouter(prefix="/resources", tags=["Resources"])


@router.get("", response_model=List[ResourceResponse])
async def list_resources(category: Optional[str] = Query(None)):
    return get_resource_service().list(category=category)
