# =====================================================================
# REMINDER CRUD LAYER - crud/reminder.py
# =====================================================================

from typing import Optional, List, Dict, Any, Tuple, Type, Union
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from glowfit.models.glow import GlowReminder
from glowfit.models.fitness import FitnessReminder
from glowfit.schemas.common import PaginationParams

Reminder = Union[GlowReminder, FitnessReminder]


class CRUDReminder:
    """
    CRUD operations shared by glow and fitness reminders.

    The two tables only differ in the column pointing at their owner
    (plan_id or item_id), which is passed in as `owner_field`.
    """

    def __init__(self, model: Type[Reminder], owner_field: str):
        self.model = model
        self.owner_field = owner_field

    @property
    def owner_column(self):
        return getattr(self.model, self.owner_field)

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        owner_id: UUID,
        schedule: Dict[str, Any],
        next_reminder: datetime,
    ) -> Reminder:
        db_obj = self.model(
            user_id=user_id,
            next_reminder=next_reminder,
            is_active=True,
            **{self.owner_field: owner_id},
            **schedule,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[Reminder]:
        return (
            db.query(self.model)
            .filter(self.model.id == id, self.model.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: UUID,
        params: PaginationParams,
        owner_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Reminder], int]:
        query = db.query(self.model).filter(self.model.user_id == user_id)
        if owner_id is not None:
            query = query.filter(self.owner_column == owner_id)
        if is_active is not None:
            query = query.filter(self.model.is_active == is_active)

        total = query.count()
        reminders = (
            query.order_by(desc(self.model.created_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return reminders, total

    def get_due(self, db: Session, *, now: datetime) -> List[Reminder]:
        """Active reminders whose next_reminder has passed, across all users."""
        return (
            db.query(self.model)
            .filter(self.model.is_active.is_(True), self.model.next_reminder <= now)
            .order_by(self.model.next_reminder)
            .all()
        )

    def count_active(self, db: Session, *, user_id: UUID) -> int:
        return (
            db.query(func.count(self.model.id))
            .filter(self.model.user_id == user_id, self.model.is_active.is_(True))
            .scalar()
        )

    # =====================================================================
    # UPDATE / DELETE OPERATIONS
    # =====================================================================

    def update(self, db: Session, *, db_obj: Reminder, update_data: Dict[str, Any]) -> Reminder:
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: Reminder) -> None:
        db.delete(db_obj)
        db.commit()


crud_glow_reminder = CRUDReminder(GlowReminder, owner_field="plan_id")
crud_fitness_reminder = CRUDReminder(FitnessReminder, owner_field="item_id")
