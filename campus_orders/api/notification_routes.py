"""FastAPI routes for the notification inbox"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from campus_orders.api.dependencies import get_current_user, require_admin
from campus_orders.db.database import get_db
from campus_orders.models.notification import NotificationType
from campus_orders.models.schemas import (
    MarkAllReadResponse,
    NotificationCreate,
    NotificationCreateResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationStatsResponse
)
from campus_orders.services.auth import CurrentUser
from campus_orders.services.notification_service import NotificationService, StatsPeriod

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["notifications"])


@router.get("/notifications", response_model=NotificationListResponse)
def list_notifications(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[NotificationType] = Query(None),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """List the caller's notifications"""
    notifications, total, unread_count = NotificationService.get_notifications(
        db, user.user_id, skip, limit, type, unread_only
    )
    return NotificationListResponse(
        total=total,
        unread_count=unread_count,
        notifications=notifications,
        page=skip // limit + 1,
        page_size=limit
    )


# Registered before /{notification_id}/read
@router.patch("/notifications/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Mark all of the caller's notifications as read"""
    return MarkAllReadResponse(updated=NotificationService.mark_all_as_read(db, user.user_id))


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Mark one notification as read"""
    return NotificationService.mark_as_read(db, user.user_id, notification_id)


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Delete one of the caller's notifications"""
    NotificationService.delete_notification(db, user.user_id, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/notifications/admin/create",
    response_model=NotificationCreateResponse,
    status_code=status.HTTP_201_CREATED
)
def create_notifications(
    notification_data: NotificationCreate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    """Send a manual notification to the listed users (admin only)"""
    notifications = NotificationService.broadcast(
        db,
        notification_data.user_ids,
        notification_data.title,
        notification_data.message,
        notification_data.type
    )
    logger.info(f"Admin {admin.user_id} sent {len(notifications)} notifications")
    return NotificationCreateResponse(count=len(notifications), notifications=notifications)


@router.get("/notifications/admin/stats", response_model=NotificationStatsResponse)
def notification_stats(
    period: StatsPeriod = Query(StatsPeriod.WEEK),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    """Notification counts for the period (admin only)"""
    stats = NotificationService.get_stats(db, period)
    return NotificationStatsResponse(
        period=stats.period.value,
        total=stats.total,
        unread=stats.unread,
        read=stats.read,
        by_type=stats.by_type,
        recent=stats.recent
    )
