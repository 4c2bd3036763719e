# glowfit/api/routers/notifications.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok, paged, pagination
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.enums import NotificationType
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse, PaginationParams
from glowfit.schemas.notification import (
    AffectedCount,
    BulkDeleteRequest,
    MarkReadRequest,
    NotificationCreate,
    NotificationOut,
    NotificationPage,
)
from glowfit.services.notification import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


# =====================================================================
# COLLECTION ENDPOINTS
# =====================================================================

@router.get("", response_model=ApiResponse[NotificationPage], summary="List my notifications")
def list_notifications(
    type: Optional[NotificationType] = Query(None),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    params: PaginationParams = Depends(pagination(20)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Newest first; `unreadCount` counts every unread notification, not just this page."""
    rows, total, unread = notification_service.list_notifications(
        db, current_user, params, type=type, is_read=is_read
    )
    return paged(rows, params, total, unread_count=unread)


@router.post(
    "",
    response_model=ApiResponse[NotificationOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification",
)
def create_notification(
    data: NotificationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(notification_service.create_notification(db, current_user, data), "通知创建成功")


@router.patch("", response_model=ApiResponse[AffectedCount], summary="Mark notifications as read")
def mark_many_read(
    data: MarkReadRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pass **notificationIds** or set **markAllAsRead**."""
    count = notification_service.mark_many_read(db, current_user, data)
    return ok({"count": count}, f"已标记 {count} 条通知为已读")


@router.delete("", response_model=ApiResponse[AffectedCount], summary="Delete notifications")
def delete_many(
    data: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Pass **ids**, or set **deleteAll** or **deleteRead**."""
    count = notification_service.delete_many(db, current_user, data)
    return ok({"count": count}, f"已删除 {count} 条通知")


# =====================================================================
# SINGLE NOTIFICATION
# =====================================================================

@router.get("/{notification_id}", response_model=ApiResponse[NotificationOut], summary="Get a notification")
def get_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(notification_service.get_notification(db, current_user, notification_id))


@router.patch("/{notification_id}", response_model=ApiResponse[NotificationOut], summary="Mark a notification as read")
def mark_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(notification_service.mark_read(db, current_user, notification_id), "已标记为已读")


@router.delete("/{notification_id}", response_model=ApiResponse[None], summary="Delete a notification")
def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification_service.delete_notification(db, current_user, notification_id)
    return ok(message="通知删除成功")
