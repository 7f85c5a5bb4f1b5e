"""
Notification Routes

GET /notifications - The caller's notifications, newest first
PATCH /notifications - Mark notifications as read
"""

from fastapi import APIRouter, Depends
from typing import List, Optional

from internhub.core.auth import get_current_user
from internhub.services.notification_service import get_notification_service
from internhub.schemas.schemas import MarkReadRequest, MessageResponse, NotificationResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(user: dict = Depends(get_current_user)):
    return get_notification_service().list_for_user(user["id"])


@router.patch("", response_model=MessageResponse)
async def mark_notifications_read(request: Optional[MarkReadRequest] = None,
                                  user: dict = Depends(get_current_user)):
    """Mark the given notifications read, or all of them when no ids are sent."""
    notification_ids = request.notification_ids if request else None
    marked = get_notification_service().mark_read(user["id"], notification_ids)
    return MessageResponse(message=f"Marked {marked} notifications as read")
