# services/fitness.py
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from glowfit.core.config import utc_now
from glowfit.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
)
from glowfit.crud.fitness import crud_fitness_history, crud_fitness_item, crud_user_video
from glowfit.crud.glow import unique_ids
from glowfit.crud.notification import crud_notification
from glowfit.models.enums import NotificationType, PlanStatus
from glowfit.models.fitness import FitnessHistory, FitnessItem
from glowfit.models.user import User
from glowfit.schemas.common import PaginationParams
from glowfit.schemas.fitness import (
    FitnessCompleteRequest,
    FitnessItemCreate,
    FitnessItemUpdate,
)
from glowfit.services.glow import build_history_stats

logger = logging.getLogger(__name__)

ITEM_FIELDS = {"name", "planned_duration", "planned_sets", "planned_reps", "status"}


class FitnessService:
    """Service layer for fitness items and their history."""

    def _check_videos(self, db: Session, user: User, video_ids: Optional[List[UUID]]) -> None:
        """
        Raises:
            ConflictError: If any referenced video is not the user's
        """
        videos = unique_ids(video_ids)
        if videos and crud_user_video.count_owned(db, user_id=user.id, ids=videos) != len(videos):
            raise ConflictError("部分视频不存在或无权访问")

    # =====================================================================
    # ITEMS
    # =====================================================================

    def list_items(
        self,
        db: Session,
        user: User,
        params: PaginationParams,
        status: Optional[PlanStatus] = None,
    ) -> Tuple[List[FitnessItem], int]:
        return crud_fitness_item.get_multi_by_user(db, user_id=user.id, params=params, status=status)

    def get_item(self, db: Session, user: User, item_id: UUID) -> FitnessItem:
        item = crud_fitness_item.get_owned(db, id=item_id, user_id=user.id)
        if not item:
            raise NotFoundError("运动条目不存在")
        return item

    def create_item(self, db: Session, user: User, data: FitnessItemCreate) -> FitnessItem:
        self._check_videos(db, user, data.video_ids)
        return crud_fitness_item.create(
            db,
            user_id=user.id,
            obj_data=data.model_dump(include=ITEM_FIELDS - {"status"}),
            video_ids=data.video_ids or [],
        )

    def update_item(
        self, db: Session, user: User, item_id: UUID, data: FitnessItemUpdate
    ) -> FitnessItem:
        """
        Partial update. Planned values may be cleared with null; name and
        status are only changed when a value is given.
        """
        item = self.get_item(db, user, item_id)
        self._check_videos(db, user, data.video_ids)

        update_data = data.model_dump(exclude_unset=True, include=ITEM_FIELDS)
        for field in ("name", "status"):
            if update_data.get(field) is None:
                update_data.pop(field, None)

        return crud_fitness_item.update(
            db,
            db_obj=item,
            update_data=update_data,
            replace_videos="video_ids" in data.model_fields_set,
            video_ids=data.video_ids,
        )

    def delete_item(self, db: Session, user: User, item_id: UUID) -> None:
        item = self.get_item(db, user, item_id)
        crud_fitness_item.remove(db, db_obj=item)

    # =====================================================================
    # COMPLETION & HISTORY
    # =====================================================================

    def complete_item(
        self, db: Session, user: User, item_id: UUID, data: FitnessCompleteRequest
    ) -> FitnessHistory:
        """
        Record one completion of an ACTIVE item; history and notification
        commit together or not at all.

        Raises:
            NotFoundError: If the item is missing or not the user's
            InvalidStateError: If the item is not ACTIVE
            ServiceError: If the transaction fails
        """
        item = self.get_item(db, user, item_id)
        if item.status != PlanStatus.ACTIVE:
            raise InvalidStateError("只能完成活跃状态的运动条目")

        item_name = item.name
        completed_at = data.completed_at or utc_now()

        try:
            updated = crud_fitness_item.mark_completed(
                db, id=item.id, user_id=user.id, completed_at=completed_at
            )
            if updated == 0:
                db.rollback()
                raise InvalidStateError("只能完成活跃状态的运动条目")

            history = crud_fitness_history.add(
                db,
                item_id=item.id,
                user_id=user.id,
                completed_at=completed_at,
                duration=data.duration,
                sets=data.sets,
                reps=data.reps,
                notes=data.notes,
            )
            crud_notification.create(
                db,
                user_id=user.id,
                type=NotificationType.ACHIEVEMENT,
                title="运动完成",
                content=f"恭喜您完成了「{item_name}」运动！",
                related_id=item.id,
                commit=False,
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Completing fitness item {item_id} failed: {e}")
            raise ServiceError("记录完成情况失败，请重试")

        db.refresh(history)
        return history

    def list_history(
        self,
        db: Session,
        user: User,
        item_id: UUID,
        params: PaginationParams,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[FitnessHistory], int, Dict[str, int]]:
        item = self.get_item(db, user, item_id)
        filters = dict(user_id=user.id, item_id=item.id, start_date=start_date, end_date=end_date)

        rows, total = crud_fitness_history.get_multi(db, params=params, **filters)
        stats = build_history_stats(crud_fitness_history.aggregate(db, **filters))
        return rows, total, stats

    def delete_history(self, db: Session, user: User, history_id: UUID) -> None:
        history = crud_fitness_history.get_owned(db, id=history_id, user_id=user.id)
        if not history:
            raise NotFoundError("记录不存在")
        crud_fitness_history.remove(db, db_obj=history)


fitness_service = FitnessService()
