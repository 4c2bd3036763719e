# glowfit/api/routers/fitness_items.py
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
from glowfit.schemas.fitness import (
    FitnessCompleteRequest,
    FitnessHistoryOut,
    FitnessHistoryPage,
    FitnessItemCreate,
    FitnessItemDetail,
    FitnessItemOut,
    FitnessItemUpdate,
)
from glowfit.services.fitness import fitness_service

router = APIRouter(prefix="/api/fitness-items", tags=["Fitness Items"])


# =====================================================================
# ITEM CRUD
# =====================================================================

@router.get("", response_model=ApiResponse[Page[FitnessItemOut]], summary="List my fitness items")
def list_items(
    item_status: Optional[PlanStatus] = Query(None, alias="status"),
    params: PaginationParams = Depends(pagination(10)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    items, total = fitness_service.list_items(db, current_user, params, status=item_status)
    return paged(items, params, total)


@router.post(
    "",
    response_model=ApiResponse[FitnessItemOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a fitness item",
)
def create_item(
    data: FitnessItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create an ACTIVE item.

    - **videoIds**: Optional instructional videos, all owned by the user
    """
    return ok(fitness_service.create_item(db, current_user, data), "运动条目创建成功")


@router.get("/{item_id}", response_model=ApiResponse[FitnessItemDetail], summary="Get a fitness item")
def get_item(
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(fitness_service.get_item(db, current_user, item_id))


@router.put("/{item_id}", response_model=ApiResponse[FitnessItemOut], summary="Update a fitness item")
def update_item(
    item_id: UUID,
    data: FitnessItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Partial update. **videoIds** replaces the linked videos when present;
    `null` or `[]` removes them all.
    """
    return ok(fitness_service.update_item(db, current_user, item_id, data), "运动条目更新成功")


@router.delete("/{item_id}", response_model=ApiResponse[None], summary="Delete a fitness item")
def delete_item(
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fitness_service.delete_item(db, current_user, item_id)
    return ok(message="运动条目删除成功")


# =====================================================================
# COMPLETION & HISTORY
# =====================================================================

@router.post(
    "/{item_id}/complete",
    response_model=ApiResponse[FitnessHistoryOut],
    status_code=status.HTTP_201_CREATED,
    summary="Record a workout",
)
def complete_item(
    item_id: UUID,
    data: FitnessCompleteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    history = fitness_service.complete_item(db, current_user, item_id, data)
    return ok(history, "运动记录已保存")


@router.get(
    "/{item_id}/history",
    response_model=ApiResponse[FitnessHistoryPage],
    summary="List workouts of an item",
)
def list_history(
    item_id: UUID,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    params: PaginationParams = Depends(pagination(20)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows, total, stats = fitness_service.list_history(
        db,
        current_user,
        item_id,
        params,
        start_date=to_naive_utc(start_date),
        end_date=to_naive_utc(end_date),
    )
    return paged(rows, params, total, stats=stats)
