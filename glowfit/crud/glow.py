# =====================================================================
# GLOW CRUD LAYER - crud/glow.py
# =====================================================================

from typing import Optional, List, Dict, Any, Iterable, Tuple
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import func, desc

from glowfit.core.config import utc_now
from glowfit.models.glow import (
    GlowArea,
    GlowDevice,
    GlowPlan,
    GlowPlanArea,
    GlowPlanDevice,
    GlowHistory,
    GlowHistoryArea,
    GlowHistoryDevice,
)
from glowfit.models.enums import PlanStatus
from glowfit.schemas.common import PaginationParams


def unique_ids(ids: Optional[Iterable[UUID]]) -> List[UUID]:
    """De-duplicate ids while keeping their order."""
    return list(dict.fromkeys(ids or []))


class CRUDGlowArea:
    """CRUD operations for GlowArea model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(self, db: Session, *, user_id: UUID, name: str) -> GlowArea:
        db_obj = GlowArea(user_id=user_id, name=name)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[GlowArea]:
        """Get an area only if it belongs to the user."""
        return (
            db.query(GlowArea)
            .filter(GlowArea.id == id, GlowArea.user_id == user_id)
            .first()
        )

    def get_by_name(
        self, db: Session, *, user_id: UUID, name: str, exclude_id: Optional[UUID] = None
    ) -> Optional[GlowArea]:
        """Find an area by name within the user's areas, optionally ignoring one id."""
        query = db.query(GlowArea).filter(GlowArea.user_id == user_id, GlowArea.name == name)
        if exclude_id is not None:
            query = query.filter(GlowArea.id != exclude_id)
        return query.first()

    def get_multi_by_user(self, db: Session, *, user_id: UUID) -> List[GlowArea]:
        return (
            db.query(GlowArea)
            .filter(GlowArea.user_id == user_id)
            .order_by(desc(GlowArea.created_at))
            .all()
        )

    def count_owned(self, db: Session, *, user_id: UUID, ids: List[UUID]) -> int:
        """Count how many of the given ids are areas owned by the user."""
        if not ids:
            return 0
        return (
            db.query(func.count(GlowArea.id))
            .filter(GlowArea.user_id == user_id, GlowArea.id.in_(ids))
            .scalar()
        )

    def count_plan_links(self, db: Session, *, area_id: UUID) -> int:
        return (
            db.query(func.count(GlowPlanArea.id))
            .filter(GlowPlanArea.area_id == area_id)
            .scalar()
        )

    # =====================================================================
    # UPDATE / DELETE OPERATIONS
    # =====================================================================

    def update(self, db: Session, *, db_obj: GlowArea, name: str) -> GlowArea:
        db_obj.name = name
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: GlowArea) -> None:
        db.delete(db_obj)
        db.commit()


class CRUDGlowDevice:
    """CRUD operations for GlowDevice model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self, db: Session, *, user_id: UUID, name: str, model: Optional[str] = None
    ) -> GlowDevice:
        db_obj = GlowDevice(user_id=user_id, name=name, model=model)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[GlowDevice]:
        """Get a device only if it belongs to the user."""
        return (
            db.query(GlowDevice)
            .filter(GlowDevice.id == id, GlowDevice.user_id == user_id)
            .first()
        )

    def get_by_name(
        self, db: Session, *, user_id: UUID, name: str, exclude_id: Optional[UUID] = None
    ) -> Optional[GlowDevice]:
        query = db.query(GlowDevice).filter(
            GlowDevice.user_id == user_id, GlowDevice.name == name
        )
        if exclude_id is not None:
            query = query.filter(GlowDevice.id != exclude_id)
        return query.first()

    def get_multi_by_user(self, db: Session, *, user_id: UUID) -> List[GlowDevice]:
        return (
            db.query(GlowDevice)
            .filter(GlowDevice.user_id == user_id)
            .order_by(desc(GlowDevice.created_at))
            .all()
        )

    def count_owned(self, db: Session, *, user_id: UUID, ids: List[UUID]) -> int:
        if not ids:
            return 0
        return (
            db.query(func.count(GlowDevice.id))
            .filter(GlowDevice.user_id == user_id, GlowDevice.id.in_(ids))
            .scalar()
        )

    def count_plan_links(self, db: Session, *, device_id: UUID) -> int:
        return (
            db.query(func.count(GlowPlanDevice.id))
            .filter(GlowPlanDevice.device_id == device_id)
            .scalar()
        )

    # =====================================================================
    # UPDATE / DELETE OPERATIONS
    # =====================================================================

    def update(self, db: Session, *, db_obj: GlowDevice, update_data: Dict[str, Any]) -> GlowDevice:
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def remove(self, db: Session, *, db_obj: GlowDevice) -> None:
        db.delete(db_obj)
        db.commit()


class CRUDGlowPlan:
    """CRUD operations for GlowPlan model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        user_id: UUID,
        name: str,
        start_date: datetime,
        area_ids: List[UUID],
        device_ids: List[UUID],
    ) -> GlowPlan:
        """
        Create a plan together with its area and device links.

        Args:
            db: Database session
            user_id: Owner of the plan
            name: Plan name
            start_date: When the plan starts
            area_ids: Areas already verified to belong to the owner
            device_ids: Devices already verified to belong to the owner

        Returns:
            Created GlowPlan instance
        """
        db_obj = GlowPlan(
            user_id=user_id,
            name=name,
            start_date=start_date,
            status=PlanStatus.ACTIVE,
        )
        db_obj.area_links = [GlowPlanArea(area_id=area_id) for area_id in unique_ids(area_ids)]
        db_obj.device_links = [
            GlowPlanDevice(device_id=device_id) for device_id in unique_ids(device_ids)
        ]

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[GlowPlan]:
        return (
            db.query(GlowPlan)
            .filter(GlowPlan.id == id, GlowPlan.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self,
        db: Session,
        *,
        user_id: UUID,
        params: PaginationParams,
        status: Optional[PlanStatus] = None,
    ) -> Tuple[List[GlowPlan], int]:
        """
        Get paginated plans of a user, newest first.

        Returns:
            Tuple of (plans list, total count)
        """
        query = db.query(GlowPlan).filter(GlowPlan.user_id == user_id)
        if status is not None:
            query = query.filter(GlowPlan.status == status)

        total = query.count()
        plans = (
            query.order_by(desc(GlowPlan.created_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return plans, total

    def get_all(self, db: Session, *, user_id: Optional[UUID] = None) -> List[GlowPlan]:
        """All plans of one user, or of every user when user_id is None."""
        query = db.query(GlowPlan)
        if user_id is not None:
            query = query.filter(GlowPlan.user_id == user_id)
        return query.order_by(desc(GlowPlan.created_at)).all()

    def count(
        self, db: Session, *, user_id: UUID, status: Optional[PlanStatus] = None
    ) -> int:
        query = db.query(func.count(GlowPlan.id)).filter(GlowPlan.user_id == user_id)
        if status is not None:
            query = query.filter(GlowPlan.status == status)
        return query.scalar()

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def update(
        self,
        db: Session,
        *,
        db_obj: GlowPlan,
        update_data: Dict[str, Any],
        area_ids: Optional[List[UUID]] = None,
        device_ids: Optional[List[UUID]] = None,
    ) -> GlowPlan:
        """
        Update plan fields and, when given, replace its links in the same commit.

        Args:
            db: Database session
            db_obj: Existing GlowPlan instance
            update_data: Scalar fields to set
            area_ids: New area set, None leaves the links untouched
            device_ids: New device set, None leaves the links untouched

        Returns:
            Updated GlowPlan instance
        """
        for field, value in update_data.items():
            setattr(db_obj, field, value)

        if area_ids is not None:
            for link in list(db_obj.area_links):
                db.delete(link)
            db.flush()
            db.expire(db_obj, ["area_links"])
            for area_id in unique_ids(area_ids):
                db.add(GlowPlanArea(plan_id=db_obj.id, area_id=area_id))

        if device_ids is not None:
            for link in list(db_obj.device_links):
                db.delete(link)
            db.flush()
            db.expire(db_obj, ["device_links"])
            for device_id in unique_ids(device_ids):
                db.add(GlowPlanDevice(plan_id=db_obj.id, device_id=device_id))

        db_obj.updated_at = utc_now()
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def mark_completed(
        self, db: Session, *, id: UUID, user_id: UUID, completed_at: datetime
    ) -> int:
        """
        Stamp last_completed_at only while the plan is still ACTIVE.

        Does not commit; the caller owns the transaction.

        Returns:
            Number of rows updated (0 or 1)
        """
        return (
            db.query(GlowPlan)
            .filter(
                GlowPlan.id == id,
                GlowPlan.user_id == user_id,
                GlowPlan.status == PlanStatus.ACTIVE,
            )
            .update({GlowPlan.last_completed_at: completed_at}, synchronize_session=False)
        )

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def remove(self, db: Session, *, db_obj: GlowPlan) -> None:
        """Delete a plan; history, reminders and links cascade."""
        db.delete(db_obj)
        db.commit()


class CRUDGlowHistory:
    """CRUD operations for GlowHistory model."""

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def add(
        self,
        db: Session,
        *,
        plan_id: UUID,
        user_id: UUID,
        completed_at: datetime,
        duration: Optional[int] = None,
        notes: Optional[str] = None,
        area_ids: Optional[List[UUID]] = None,
        device_ids: Optional[List[UUID]] = None,
    ) -> GlowHistory:
        """
        Stage a history row with its area/device snapshot.

        Only flushes; the completion transaction commits.
        """
        db_obj = GlowHistory(
            plan_id=plan_id,
            user_id=user_id,
            duration=duration,
            notes=notes,
            completed_at=completed_at,
        )
        area_ids = unique_ids(area_ids)
        device_ids = unique_ids(device_ids)
        areas = {a.id: a for a in db.query(GlowArea).filter(GlowArea.id.in_(area_ids))} if area_ids else {}
        devices = (
            {d.id: d for d in db.query(GlowDevice).filter(GlowDevice.id.in_(device_ids))}
            if device_ids else {}
        )
        db_obj.area_links = [
            GlowHistoryArea(area_id=area_id, name=areas[area_id].name)
            for area_id in area_ids if area_id in areas
        ]
        db_obj.device_links = [
            GlowHistoryDevice(
                device_id=device_id, name=devices[device_id].name, model=devices[device_id].model
            )
            for device_id in device_ids if device_id in devices
        ]
        db.add(db_obj)
        db.flush()
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_owned(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[GlowHistory]:
        return (
            db.query(GlowHistory)
            .filter(GlowHistory.id == id, GlowHistory.user_id == user_id)
            .first()
        )

    def _filtered(
        self,
        query,
        *,
        user_id: UUID,
        plan_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        query = query.filter(GlowHistory.user_id == user_id)
        if plan_id is not None:
            query = query.filter(GlowHistory.plan_id == plan_id)
        if start_date is not None:
            query = query.filter(GlowHistory.completed_at >= start_date)
        if end_date is not None:
            query = query.filter(GlowHistory.completed_at <= end_date)
        return query

    def get_multi(
        self,
        db: Session,
        *,
        user_id: UUID,
        params: PaginationParams,
        plan_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[GlowHistory], int]:
        query = self._filtered(
            db.query(GlowHistory),
            user_id=user_id, plan_id=plan_id, start_date=start_date, end_date=end_date,
        )
        total = query.count()
        rows = (
            query.order_by(desc(GlowHistory.completed_at))
            .offset(params.offset)
            .limit(params.limit)
            .all()
        )
        return rows, total

    def get_all(self, db: Session, *, user_id: UUID) -> List[GlowHistory]:
        return (
            db.query(GlowHistory)
            .filter(GlowHistory.user_id == user_id)
            .order_by(desc(GlowHistory.completed_at))
            .all()
        )

    def aggregate(
        self,
        db: Session,
        *,
        user_id: UUID,
        plan_id: Optional[UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """Session count and total duration over the same filter as get_multi."""
        query = self._filtered(
            db.query(
                func.count(GlowHistory.id),
                func.coalesce(func.sum(GlowHistory.duration), 0),
            ),
            user_id=user_id, plan_id=plan_id, start_date=start_date, end_date=end_date,
        )
        sessions, duration = query.one()
        return {"total_sessions": int(sessions or 0), "total_duration": int(duration or 0)}

    # =====================================================================
    # DELETE OPERATIONS
    # =====================================================================

    def remove(self, db: Session, *, db_obj: GlowHistory) -> None:
        db.delete(db_obj)
        db.commit()


crud_glow_area = CRUDGlowArea()
crud_glow_device = CRUDGlowDevice()
crud_glow_plan = CRUDGlowPlan()
crud_glow_history = CRUDGlowHistory()
