# services/glow.py
import logging
import math
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
from glowfit.crud.glow import (
    crud_glow_area,
    crud_glow_device,
    crud_glow_history,
    crud_glow_plan,
    unique_ids,
)
from glowfit.crud.notification import crud_notification
from glowfit.models.enums import NotificationType, PlanStatus
from glowfit.models.glow import GlowArea, GlowDevice, GlowHistory, GlowPlan
from glowfit.models.user import User
from glowfit.schemas.common import PaginationParams
from glowfit.schemas.glow import (
    GlowAreaCreate,
    GlowAreaUpdate,
    GlowCompleteRequest,
    GlowDeviceCreate,
    GlowDeviceUpdate,
    GlowPlanCreate,
    GlowPlanUpdate,
)

logger = logging.getLogger(__name__)


def build_history_stats(totals: Dict[str, int]) -> Dict[str, int]:
    """Add the rounded average duration to aggregated history totals."""
    sessions = totals["total_sessions"]
    # half-up, so 22.5 becomes 23
    average = math.floor(totals["total_duration"] / sessions + 0.5) if sessions else 0
    return {**totals, "average_duration": average}


class GlowService:
    """Service layer for glow areas, devices, plans and their history."""

    # =====================================================================
    # AREAS
    # =====================================================================

    def list_areas(self, db: Session, user: User) -> List[GlowArea]:
        return crud_glow_area.get_multi_by_user(db, user_id=user.id)

    def get_area(self, db: Session, user: User, area_id: UUID) -> GlowArea:
        area = crud_glow_area.get_owned(db, id=area_id, user_id=user.id)
        if not area:
            raise NotFoundError("部位不存在")
        return area

    def create_area(self, db: Session, user: User, data: GlowAreaCreate) -> GlowArea:
        """
        Raises:
            ConflictError: If the user already has an area with this name
        """
        if crud_glow_area.get_by_name(db, user_id=user.id, name=data.name):
            raise ConflictError("该部位名称已存在")
        return crud_glow_area.create(db, user_id=user.id, name=data.name)

    def update_area(
        self, db: Session, user: User, area_id: UUID, data: GlowAreaUpdate
    ) -> GlowArea:
        area = self.get_area(db, user, area_id)
        if crud_glow_area.get_by_name(db, user_id=user.id, name=data.name, exclude_id=area.id):
            raise ConflictError("该部位名称已存在")
        return crud_glow_area.update(db, db_obj=area, name=data.name)

    def delete_area(self, db: Session, user: User, area_id: UUID) -> None:
        """
        Raises:
            ConflictError: If any plan still uses the area
        """
        area = self.get_area(db, user, area_id)
        if crud_glow_area.count_plan_links(db, area_id=area.id) > 0:
            raise ConflictError("该部位正在被计划使用，无法删除")
        crud_glow_area.remove(db, db_obj=area)

    # =====================================================================
    # DEVICES
    # =====================================================================

    def list_devices(self, db: Session, user: User) -> List[GlowDevice]:
        return crud_glow_device.get_multi_by_user(db, user_id=user.id)

    def get_device(self, db: Session, user: User, device_id: UUID) -> GlowDevice:
        device = crud_glow_device.get_owned(db, id=device_id, user_id=user.id)
        if not device:
            raise NotFoundError("设备不存在")
        return device

    def create_device(self, db: Session, user: User, data: GlowDeviceCreate) -> GlowDevice:
        if crud_glow_device.get_by_name(db, user_id=user.id, name=data.name):
            raise ConflictError("该设备名称已存在")
        return crud_glow_device.create(db, user_id=user.id, name=data.name, model=data.model)

    def update_device(
        self, db: Session, user: User, device_id: UUID, data: GlowDeviceUpdate
    ) -> GlowDevice:
        device = self.get_device(db, user, device_id)
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name") is None:
            update_data.pop("name", None)
        elif crud_glow_device.get_by_name(
            db, user_id=user.id, name=update_data["name"], exclude_id=device.id
        ):
            raise ConflictError("该设备名称已存在")
        return crud_glow_device.update(db, db_obj=device, update_data=update_data)

    def delete_device(self, db: Session, user: User, device_id: UUID) -> None:
        device = self.get_device(db, user, device_id)
        if crud_glow_device.count_plan_links(db, device_id=device.id) > 0:
            raise ConflictError("该设备正在被计划使用，无法删除")
        crud_glow_device.remove(db, db_obj=device)

    # =====================================================================
    # OWNERSHIP HELPERS
    # =====================================================================

    def _check_links(
        self,
        db: Session,
        user: User,
        area_ids: Optional[List[UUID]],
        device_ids: Optional[List[UUID]],
    ) -> None:
        """
        Raises:
            ConflictError: If any referenced area or device is not the user's
        """
        areas = unique_ids(area_ids)
        if areas and crud_glow_area.count_owned(db, user_id=user.id, ids=areas) != len(areas):
            raise ConflictError("部分护理部位不存在或无权访问")

        devices = unique_ids(device_ids)
        if devices and crud_glow_device.count_owned(db, user_id=user.id, ids=devices) != len(devices):
            raise ConflictError("部分护理设备不存在或无权访问")

    # =====================================================================
    # PLANS
    # =====================================================================

    def list_plans(
        self,
        db: Session,
        user: User,
        params: PaginationParams,
        status: Optional[PlanStatus] = None,
    ) -> Tuple[List[GlowPlan], int]:
        return crud_glow_plan.get_multi_by_user(db, user_id=user.id, params=params, status=status)

    def get_plan(self, db: Session, user: User, plan_id: UUID) -> GlowPlan:
        plan = crud_glow_plan.get_owned(db, id=plan_id, user_id=user.id)
        if not plan:
            raise NotFoundError("计划不存在")
        return plan

    def create_plan(self, db: Session, user: User, data: GlowPlanCreate) -> GlowPlan:
        self._check_links(db, user, data.area_ids, data.device_ids)
        return crud_glow_plan.create(
            db,
            user_id=user.id,
            name=data.name,
            start_date=data.start_date,
            area_ids=data.area_ids or [],
            device_ids=data.device_ids or [],
        )

    def update_plan(
        self, db: Session, user: User, plan_id: UUID, data: GlowPlanUpdate
    ) -> GlowPlan:
        plan = self.get_plan(db, user, plan_id)
        self._check_links(db, user, data.area_ids, data.device_ids)

        update_data = {
            field: value
            for field, value in data.model_dump(
                exclude_unset=True, include={"name", "start_date", "status"}
            ).items()
            if value is not None
        }
        return crud_glow_plan.update(
            db,
            db_obj=plan,
            update_data=update_data,
            area_ids=data.area_ids,
            device_ids=data.device_ids,
        )

    def delete_plan(self, db: Session, user: User, plan_id: UUID) -> None:
        plan = self.get_plan(db, user, plan_id)
        crud_glow_plan.remove(db, db_obj=plan)

    # =====================================================================
    # COMPLETION & HISTORY
    # =====================================================================

    def complete_plan(
        self, db: Session, user: User, plan_id: UUID, data: GlowCompleteRequest
    ) -> GlowHistory:
        """
        Record one completion of an ACTIVE plan.

        The status guard, the history row and the achievement notification
        are written in a single transaction.

        Raises:
            NotFoundError: If the plan is missing or not the user's
            InvalidStateError: If the plan is not ACTIVE
            ConflictError: If a referenced area or device is not the user's
            ServiceError: If the transaction fails; nothing is persisted
        """
        plan = self.get_plan(db, user, plan_id)
        if plan.status != PlanStatus.ACTIVE:
            raise InvalidStateError("只能完成活跃状态的计划")
        self._check_links(db, user, data.area_ids, data.device_ids)

        plan_name = plan.name
        completed_at = data.completed_at or utc_now()

        try:
            updated = crud_glow_plan.mark_completed(
                db, id=plan.id, user_id=user.id, completed_at=completed_at
            )
            if updated == 0:
                db.rollback()
                raise InvalidStateError("只能完成活跃状态的计划")

            history = crud_glow_history.add(
                db,
                plan_id=plan.id,
                user_id=user.id,
                completed_at=completed_at,
                duration=data.duration,
                notes=data.notes,
                area_ids=data.area_ids,
                device_ids=data.device_ids,
            )
            crud_notification.create(
                db,
                user_id=user.id,
                type=NotificationType.ACHIEVEMENT,
                title="护理完成",
                content=f"恭喜您完成了「{plan_name}」护理计划！",
                related_id=plan.id,
                commit=False,
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Completing glow plan {plan_id} failed: {e}")
            raise ServiceError("记录完成情况失败，请重试")

        db.refresh(history)
        return history

    def list_history(
        self,
        db: Session,
        user: User,
        plan_id: UUID,
        params: PaginationParams,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[GlowHistory], int, Dict[str, int]]:
        """
        Returns:
            Tuple of (history rows, total count, stats over the same filter)
        """
        plan = self.get_plan(db, user, plan_id)
        filters = dict(user_id=user.id, plan_id=plan.id, start_date=start_date, end_date=end_date)

        rows, total = crud_glow_history.get_multi(db, params=params, **filters)
        stats = build_history_stats(crud_glow_history.aggregate(db, **filters))
        return rows, total, stats

    def delete_history(self, db: Session, user: User, history_id: UUID) -> None:
        history = crud_glow_history.get_owned(db, id=history_id, user_id=user.id)
        if not history:
            raise NotFoundError("记录不存在")
        crud_glow_history.remove(db, db_obj=history)


glow_service = GlowService()
