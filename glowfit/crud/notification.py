# =====================================================================
# NOTIFICATION CRUD LAYER - crud/notification.py
# =====================================================================

from typing import Optional, List, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from glowfit.models.notification import Notification
from glowfit.models.enums import NotificationType
from glowfit.schemas.common import PaginationParams


class CRUDNotification:
    """CRUD operations for Notification model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        type: NotificationType,
        title: str,
        content: str,
        related_id: Optional[UUID] = None,
        commit: bool = True,
    ) -> Notification:
        """
        Create a notification.

        Args:
            db: Database session
            user_id: Recipient
            type: Notification category
            title: Short title
            content: Body text
            related_id: Plan or item the notification refers to
            commit: False stages the row inside the caller's transaction

        Returns:
            Created Notification instance
        """
        db_obj = Notification(
            user_id=user_id,
            type=type,
            title=title,
            content=content,
            related_id=related_id,
            is_read=False,
        )
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.id == id, Notification.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: UUID,
        params: PaginationParams,
        type: Optional[NotificationType] = None,
        is_read: Optional[bool] = None,
    ) -> Tuple[List[Notification], int]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if type is not None:
            query = query.filter(Notification.type == type)
        if is_read is not None:
            query = query.filter(Notification.is_read == is_read)

        total = query.count()
        rows = (
            query.order_by(desc(Notification.created_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return rows, total

    def get_all(self, db: Session, *, user_id: Optional[UUID] = None) -> List[Notification]:
        query = db.query(Notification)
        if user_id is not None:
            query = query.filter(Notification.user_id == user_id)
        return query.order_by(desc(Notification.created_at)).all()

    def count_unread(self, db: Session, *, user_id: UUID) -> int:
        return (
            db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .scalar()
        )

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def mark_read(self, db: Session, *, db_obj: Notification) -> Notification:
        db_obj.is_read = True
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def mark_many_read(
        self, db: Session, *, user_id: UUID, ids: Optional[List[UUID]] = None
    ) -> int:
        """Mark the given ids (or every unread row when ids is None) as read."""
        query = db.query(Notification).filter(
            Notification.user_id == user_id, Notification.is_read.is_(False)
        )
        if ids is not None:
            query = query.filter(Notification.id.in_(ids))
        count = query.update({Notification.is_read: True}, synchronize_session=False)
        db.commit()
        return count

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def remove(self, db: Session, *, db_obj: Notification) -> None:
        db.delete(db_obj)
        db.commit()

    def remove_many(
        self,
        db: Session,
        *,
        user_id: UUID,
        ids: Optional[List[UUID]] = None,
        only_read: bool = False,
    ) -> int:
        """Delete the user's notifications, narrowed by ids and/or read state."""
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if ids is not None:
            query = query.filter(Notification.id.in_(ids))
        if only_read:
            query = query.filter(Notification.is_read.is_(True))
        count = query.delete(synchronize_session=False)
        db.commit()
        return count

    def remove_read_before(self, db: Session, *, cutoff: datetime) -> int:
        """Delete read notifications of every user created before the cutoff."""
        count = (
            db.query(Notification)
            .filter(Notification.is_read.is_(True), Notification.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        db.commit()
        return count


crud_notification = CRUDNotification()
