# glowfit/api/routers/reminders.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok, paged, pagination
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse, Page, PaginationParams
from glowfit.schemas.reminder import (
    FitnessReminderCreate,
    FitnessReminderOut,
    GlowReminderCreate,
    GlowReminderOut,
    ReminderUpdate,
)
from glowfit.services.reminder import fitness_reminder_service, glow_reminder_service

glow_router = APIRouter(prefix="/api/glow-reminders", tags=["Glow Reminders"])
fitness_router = APIRouter(prefix="/api/fitness-reminders", tags=["Fitness Reminders"])


# =====================================================================
# GLOW REMINDERS
# =====================================================================

@glow_router.get("", response_model=ApiResponse[Page[GlowReminderOut]], summary="List glow reminders")
def list_glow_reminders(
    plan_id: Optional[UUID] = Query(None, alias="planId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PaginationParams = Depends(pagination(20)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reminders, total = glow_reminder_service.list_reminders(
        db, current_user, params, owner_id=plan_id, is_active=is_active
    )
    return paged(reminders, params, total)


@glow_router.post(
    "",
    response_model=ApiResponse[GlowReminderOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a glow reminder",
)
def create_glow_reminder(
    data: GlowReminderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    - **frequency**: DAILY, WEEKLY or CUSTOM
    - **time**: HH:mm in the reminder time zone
    - **weekdays**: ISO weekdays (1 = Monday) for CUSTOM schedules
    """
    reminder = glow_reminder_service.create_reminder(db, current_user, data.plan_id, data)
    return ok(reminder, "提醒创建成功")


@glow_router.get("/{reminder_id}", response_model=ApiResponse[GlowReminderOut], summary="Get a glow reminder")
def get_glow_reminder(
    reminder_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(glow_reminder_service.get_reminder(db, current_user, reminder_id))


@glow_router.put("/{reminder_id}", response_model=ApiResponse[GlowReminderOut], summary="Update a glow reminder")
def update_glow_reminder(
    reminder_id: UUID,
    data: ReminderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reminder = glow_reminder_service.update_reminder(db, current_user, reminder_id, data)
    return ok(reminder, "提醒更新成功")


@glow_router.delete("/{reminder_id}", response_model=ApiResponse[None], summary="Delete a glow reminder")
def delete_glow_reminder(
    reminder_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    glow_reminder_service.delete_reminder(db, current_user, reminder_id)
    return ok(message="提醒删除成功")


# =====================================================================
# FITNESS REMINDERS
# =====================================================================

@fitness_router.get("", response_model=ApiResponse[Page[FitnessReminderOut]], summary="List fitness reminders")
def list_fitness_reminders(
    item_id: Optional[UUID] = Query(None, alias="itemId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    params: PaginationParams = Depends(pagination(20)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reminders, total = fitness_reminder_service.list_reminders(
        db, current_user, params, owner_id=item_id, is_active=is_active
    )
    return paged(reminders, params, total)


@fitness_router.post(
    "",
    response_model=ApiResponse[FitnessReminderOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a fitness reminder",
)
def create_fitness_reminder(
    data: FitnessReminderCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reminder = fitness_reminder_service.create_reminder(db, current_user, data.item_id, data)
    return ok(reminder, "提醒创建成功")


@fitness_router.get("/{reminder_id}", response_model=ApiResponse[FitnessReminderOut], summary="Get a fitness reminder")
def get_fitness_reminder(
    reminder_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(fitness_reminder_service.get_reminder(db, current_user, reminder_id))


@fitness_router.put("/{reminder_id}", response_model=ApiResponse[FitnessReminderOut], summary="Update a fitness reminder")
def update_fitness_reminder(
    reminder_id: UUID,
    data: ReminderUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    reminder = fitness_reminder_service.update_reminder(db, current_user, reminder_id, data)
    return ok(reminder, "提醒更新成功")


@fitness_router.delete("/{reminder_id}", response_model=ApiResponse[None], summary="Delete a fitness reminder")
def delete_fitness_reminder(
    reminder_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fitness_reminder_service.delete_reminder(db, current_user, reminder_id)
    return ok(message="提醒删除成功")
