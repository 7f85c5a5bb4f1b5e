"""
System Routes

GET /system/test-db - Per-store connectivity and record counts
POST /system/init - Create schema, collections and indexes
POST /system/seed - Insert sample data (idempotent)
"""

from fastapi import APIRouter

from internhub.services.system_service import check_stores, initialize_stores, seed_sample_data
from internhub.schemas.schemas import MessageResponse, SeedResponse, StoreCheckResponse

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/test-db", response_model=StoreCheckResponse)
async def check_databases():
    return check_stores()


@router.post("/init", response_model=MessageResponse)
async def init_stores():
    initialize_stores()
    return MessageResponse(message="Database initialized")


@router.post("/seed", response_model=SeedResponse)
async def seed():
    return seed_sample_data()
