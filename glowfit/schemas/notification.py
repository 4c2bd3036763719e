# schemas/notification.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from glowfit.models.enums import NotificationType
from glowfit.schemas.common import CamelModel, Page


class NotificationCreate(CamelModel):
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=500)
    related_id: Optional[UUID] = None


class NotificationOut(CamelModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    content: str
    is_read: bool
    related_id: Optional[UUID] = None
    created_at: datetime


class NotificationPage(Page[NotificationOut]):
    unread_count: int


class MarkReadRequest(CamelModel):
    """Either explicit ids or the mark-all flag."""
    notification_ids: Optional[List[UUID]] = None
    mark_all_as_read: bool = False


class BulkDeleteRequest(CamelModel):
    ids: Optional[List[UUID]] = None
    delete_all: bool = False
    delete_read: bool = False


class AffectedCount(CamelModel):
    count: int


class CleanupResult(CamelModel):
    deleted: int
    cutoff: datetime
