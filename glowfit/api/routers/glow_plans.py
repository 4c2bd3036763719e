# glowfit/api/routers/glow_plans.py
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok, paged, pagination
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.enums import PlanStatus
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse, Page, PaginationParams, to_naive_utc
from glowfit.schemas.glow import (
    GlowCompleteRequest,
    GlowHistoryOut,
    GlowHistoryPage,
    GlowPlanCreate,
    GlowPlanDetail,
    GlowPlanOut,
    GlowPlanUpdate,
)
from glowfit.services.glow import glow_service

router = APIRouter(prefix="/api/glow-plans", tags=["Glow Plans"])


# =====================================================================
# PLAN CRUD
# =====================================================================

@router.get("", response_model=ApiResponse[Page[GlowPlanOut]], summary="List my plans")
def list_plans(
    plan_status: Optional[PlanStatus] = Query(None, alias="status"),
    params: PaginationParams = Depends(pagination(10)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Paginated, newest first, optionally filtered by status."""
    plans, total = glow_service.list_plans(db, current_user, params, status=plan_status)
    return paged(plans, params, total)


@router.post(
    "",
    response_model=ApiResponse[GlowPlanOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a plan",
)
def create_plan(
    data: GlowPlanCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create an ACTIVE plan.

    - **areaIds** / **deviceIds**: Optional; every id must be one of the user's
    """
    return ok(glow_service.create_plan(db, current_user, data), "计划创建成功")


@router.get("/{plan_id}", response_model=ApiResponse[GlowPlanDetail], summary="Get a plan")
def get_plan(
    plan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Plan with its areas, devices, active reminders and 10 most recent completions."""
    return ok(glow_service.get_plan(db, current_user, plan_id))


@router.put("/{plan_id}", response_model=ApiResponse[GlowPlanOut], summary="Update a plan")
def update_plan(
    plan_id: UUID,
    data: GlowPlanUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Partial update. When **areaIds** or **deviceIds** is present the links
    are replaced as a whole.
    """
    return ok(glow_service.update_plan(db, current_user, plan_id, data), "计划更新成功")


@router.delete("/{plan_id}", response_model=ApiResponse[None], summary="Delete a plan")
def delete_plan(
    plan_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Deletes the plan with its history, reminders and links."""
    glow_service.delete_plan(db, current_user, plan_id)
    return ok(message="计划删除成功")


# =====================================================================
# COMPLETION & HISTORY
# =====================================================================

@router.post(
    "/{plan_id}/complete",
    response_model=ApiResponse[GlowHistoryOut],
    status_code=status.HTTP_201_CREATED,
    summary="Record a completion",
)
def complete_plan(
    plan_id: UUID,
    data: GlowCompleteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Record one session of an ACTIVE plan. Creates one history row and one
    achievement notification together.
    """
    history = glow_service.complete_plan(db, current_user, plan_id, data)
    return ok(history, "护理记录已保存")


@router.get(
    "/{plan_id}/history",
    response_model=ApiResponse[GlowHistoryPage],
    summary="List completions of a plan",
)
def list_history(
    plan_id: UUID,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    params: PaginationParams = Depends(pagination(20)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Paginated history with totals computed over the same date filter."""
    rows, total, stats = glow_service.list_history(
        db,
        current_user,
        plan_id,
        params,
        start_date=to_naive_utc(start_date),
        end_date=to_naive_utc(end_date),
    )
    return paged(rows, params, total, stats=stats)
