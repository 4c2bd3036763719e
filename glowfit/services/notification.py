# services/notification.py
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from glowfit.core.exceptions import NotFoundError, ValidationError
from glowfit.crud.notification import crud_notification
from glowfit.models.enums import NotificationType
from glowfit.models.notification import Notification
from glowfit.models.user import User
from glowfit.schemas.common import PaginationParams
from glowfit.schemas.notification import BulkDeleteRequest, MarkReadRequest, NotificationCreate


class NotificationService:
    """In-app notifications of the current user."""

    def list_notifications(
        self,
        db: Session,
        user: User,
        params: PaginationParams,
        type: Optional[NotificationType] = None,
        is_read: Optional[bool] = None,
    ) -> Tuple[List[Notification], int, int]:
        """
        Returns:
            Tuple of (notifications, total matching, unread count overall)
        """
        rows, total = crud_notification.get_multi_by_user(
            db, user_id=user.id, params=params, type=type, is_read=is_read
        )
        return rows, total, crud_notification.count_unread(db, user_id=user.id)

    def get_notification(self, db: Session, user: User, notification_id: UUID) -> Notification:
        notification = crud_notification.get_owned(db, id=notification_id, user_id=user.id)
        if not notification:
            raise NotFoundError("通知不存在")
        return notification

    def create_notification(
        self, db: Session, user: User, data: NotificationCreate
    ) -> Notification:
        return crud_notification.create(
            db,
            user_id=user.id,
            type=data.type,
            title=data.title,
            content=data.content,
            related_id=data.related_id,
        )

    def mark_read(self, db: Session, user: User, notification_id: UUID) -> Notification:
        notification = self.get_notification(db, user, notification_id)
        return crud_notification.mark_read(db, db_obj=notification)

    def mark_many_read(self, db: Session, user: User, data: MarkReadRequest) -> int:
        """
        Raises:
            ValidationError: If neither ids nor the mark-all flag is given
        """
        if data.mark_all_as_read:
            return crud_notification.mark_many_read(db, user_id=user.id)
        if data.notification_ids:
            return crud_notification.mark_many_read(
                db, user_id=user.id, ids=list(set(data.notification_ids))
            )
        raise ValidationError("请提供要标记的通知ID或选择全部标记为已读")

    def delete_notification(self, db: Session, user: User, notification_id: UUID) -> None:
        notification = self.get_notification(db, user, notification_id)
        crud_notification.remove(db, db_obj=notification)

    def delete_many(self, db: Session, user: User, data: BulkDeleteRequest) -> int:
        """
        Raises:
            ValidationError: If no deletion scope is given
        """
        if data.delete_all:
            return crud_notification.remove_many(db, user_id=user.id)
        if data.delete_read:
            return crud_notification.remove_many(db, user_id=user.id, only_read=True)
        if data.ids:
            return crud_notification.remove_many(db, user_id=user.id, ids=list(set(data.ids)))
        raise ValidationError("请提供要删除的通知ID或删除条件")


notification_service = NotificationService()
