# =====================================================================
# FITNESS CRUD LAYER - crud/fitness.py
# =====================================================================

from typing import Optional, List, Dict, Any, Set, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from glowfit.core.config import utc_now
from glowfit.crud.glow import unique_ids
from glowfit.models.fitness import (
    UserVideo,
    FitnessItem,
    FitnessItemVideo,
    FitnessHistory,
)
from glowfit.models.enums import PlanStatus
from glowfit.schemas.common import PaginationParams


class CRUDUserVideo:
    """CRUD operations for UserVideo model."""

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        filename: str,
        original_name: str,
        mime_type: str,
        size: int,
        path: str,
        url: str,
    ) -> UserVideo:
        db_obj = UserVideo(
            user_id=user_id,
            filename=filename,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            path=path,
            url=url,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[UserVideo]:
        return (
            db.query(UserVideo)
            .filter(UserVideo.id == id, UserVideo.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self, db: Session, *, user_id: UUID, params: PaginationParams
    ) -> Tuple[List[UserVideo], int]:
        query = db.query(UserVideo).filter(UserVideo.user_id == user_id)
        total = query.count()
        videos = (
            query.order_by(desc(UserVideo.created_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return videos, total

    def count_owned(self, db: Session, *, user_id: UUID, ids: List[UUID]) -> int:
        if not ids:
            return 0
        return (
            db.query(func.count(UserVideo.id))
            .filter(UserVideo.user_id == user_id, UserVideo.id.in_(ids))
            .scalar()
        )

    def count_item_links(self, db: Session, *, video_id: UUID) -> int:
        return (
            db.query(func.count(FitnessItemVideo.id))
            .filter(FitnessItemVideo.video_id == video_id)
            .scalar()
        )

    def get_all_urls(self, db: Session) -> Set[str]:
        """URLs of every recorded video across all users."""
        return {url for (url,) in db.query(UserVideo.url)}

    def count(self, db: Session) -> int:
        return db.query(func.count(UserVideo.id)).scalar()

    def get_unlinked_before(self, db: Session, *, cutoff: datetime) -> List[UserVideo]:
        """Videos uploaded before the cutoff that no fitness item uses."""
        return (
            db.query(UserVideo)
            .filter(UserVideo.created_at < cutoff, ~UserVideo.item_links.any())
            .order_by(UserVideo.created_at)
            .all()
        )

    def remove(self, db: Session, *, db_obj: UserVideo) -> None:
        db.delete(db_obj)
        db.commit()


class CRUDFitnessItem:
    """CRUD operations for FitnessItem model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        obj_data: Dict[str, Any],
        video_ids: List[UUID],
    ) -> FitnessItem:
        """
        Create an item together with its video links.

        Args:
            db: Database session
            user_id: Owner of the item
            obj_data: Scalar fields (name and planned values)
            video_ids: Videos already verified to belong to the owner

        Returns:
            Created FitnessItem instance
        """
        db_obj = FitnessItem(user_id=user_id, status=PlanStatus.ACTIVE, **obj_data)
        db_obj.video_links = [FitnessItemVideo(video_id=video_id) for video_id in unique_ids(video_ids)]

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[FitnessItem]:
        return (
            db.query(FitnessItem)
            .filter(FitnessItem.id == id, FitnessItem.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: UUID,
        params: PaginationParams,
        status: Optional[PlanStatus] = None,
    ) -> Tuple[List[FitnessItem], int]:
        query = db.query(FitnessItem).filter(FitnessItem.user_id == user_id)
        if status is not None:
            query = query.filter(FitnessItem.status == status)

        total = query.count()
        items = (
            query.order_by(desc(FitnessItem.created_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return items, total

    def get_all(self, db: Session, *, user_id: Optional[UUID] = None) -> List[FitnessItem]:
        query = db.query(FitnessItem)
        if user_id is not None:
            query = query.filter(FitnessItem.user_id == user_id)
        return query.order_by(desc(FitnessItem.created_at)).all()

    def count(
        self, db: Session, *, user_id: UUID, status: Optional[PlanStatus] = None
    ) -> int:
        query = db.query(func.count(FitnessItem.id)).filter(FitnessItem.user_id == user_id)
        if status is not None:
            query = query.filter(FitnessItem.status == status)
        return query.scalar()

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def update(
        self,
        db: Session,
        *,
        db_obj: FitnessItem,
        update_data: Dict[str, Any],
        replace_videos: bool = False,
        video_ids: Optional[List[UUID]] = None,
    ) -> FitnessItem:
        """
        Update item fields and optionally replace its video links.

        Args:
            db: Database session
            db_obj: Existing FitnessItem instance
            update_data: Scalar fields to set
            replace_videos: Whether the video links are replaced at all
            video_ids: New video set; None or empty clears the links

        Returns:
            Updated FitnessItem instance
        """
        for field, value in update_data.items():
            setattr(db_obj, field, value)

        if replace_videos:
            for link in list(db_obj.video_links):
                db.delete(link)
            db.flush()
            db.expire(db_obj, ["video_links"])
            for video_id in unique_ids(video_ids):
                db.add(FitnessItemVideo(item_id=db_obj.id, video_id=video_id))

        db_obj.updated_at = utc_now()
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def mark_completed(
        self, db: Session, *, id: UUID, user_id: UUID, completed_at: datetime
    ) -> int:
        """
        Stamp last_completed_at only while the item is still ACTIVE.

        Does not commit; the caller owns the transaction.
        """
        return (
            db.query(FitnessItem)
            .filter(
                FitnessItem.id == id,
                FitnessItem.user_id == user_id,
                FitnessItem.status == PlanStatus.ACTIVE,
            )
            .update({FitnessItem.last_completed_at: completed_at}, synchronize_session=False)
        )

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def remove(self, db: Session, *, db_obj: FitnessItem) -> None:
        db.delete(db_obj)
        db.commit()


class CRUDFitnessHistory:
    """CRUD operations for FitnessHistory model."""

    def add(
        self,
        db: Session,
        *,
        item_id: UUID,
        user_id: UUID,
        completed_at: datetime,
        duration: Optional[int] = None,
        sets: Optional[int] = None,
        reps: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> FitnessHistory:
        """Stage a history row. Only flushes; the completion transaction commits."""
        db_obj = FitnessHistory(
            item_id=item_id,
            user_id=user_id,
            duration=duration,
            sets=sets,
            reps=reps,
            notes=notes,
            completed_at=completed_at,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[FitnessHistory]:
        return (
            db.query(FitnessHistory)
            .filter(FitnessHistory.id == id, FitnessHistory.user_id == user_id)
            .first()
        )

    def _filtered(
        self,
        query,
        *,
        user_id: UUID,
        item_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        query = query.filter(FitnessHistory.user_id == user_id)
        if item_id is not None:
            query = query.filter(FitnessHistory.item_id == item_id)
        if start_date is not None:
            query = query.filter(FitnessHistory.completed_at >= start_date)
        if end_date is not None:
            query = query.filter(FitnessHistory.completed_at <= end_date)
        return query

    def get_multi(
        self,
        db: Session,
        *,
        user_id: UUID,
        params: PaginationParams,
        item_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[FitnessHistory], int]:
        query = self._filtered(
            db.query(FitnessHistory),
            user_id=user_id, item_id=item_id, start_date=start_date, end_date=end_date,
        )
        total = query.count()
        rows = (
            query.order_by(desc(FitnessHistory.completed_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return rows, total

    def get_all(self, db: Session, *, user_id: UUID) -> List[FitnessHistory]:
        return (
            db.query(FitnessHistory)
            .filter(FitnessHistory.user_id == user_id)
            .order_by(desc(FitnessHistory.completed_at))
            .all()
        )

    def aggregate(
        self,
        db: Session,
        *,
        user_id: UUID,
        item_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """Counts and sums over the same filter as get_multi."""
        query = self._filtered(
            db.query(
                func.count(FitnessHistory.id),
                func.coalesce(func.sum(FitnessHistory.duration), 0),
                func.coalesce(func.sum(FitnessHistory.sets), 0),
                func.coalesce(func.sum(FitnessHistory.reps), 0),
            ),
            user_id=user_id, item_id=item_id, start_date=start_date, end_date=end_date,
        )
        sessions, duration, sets, reps = query.one()
        return {
            "total_sessions": int(sessions or 0),
            "total_duration": int(duration or 0),
            "total_sets": int(sets or 0),
            "total_reps": int(reps or 0),
        }

    def remove(self, db: Session, *, db_obj: FitnessHistory) -> None:
        db.delete(db_obj)
        db.commit()


crud_user_video = CRUDUserVideo()
crud_fitness_item = CRUDFitnessItem()
crud_fitness_history = CRUDFitnessHistory()
