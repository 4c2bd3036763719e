# glowfit/api/routers/glow_areas.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.schemas.glow import GlowAreaCreate, GlowAreaDetail, GlowAreaOut, GlowAreaUpdate
from glowfit.services.glow import glow_service

router = APIRouter(prefix="/api/glow-areas", tags=["Glow Areas"])


@router.get("", response_model=ApiResponse[List[GlowAreaOut]], summary="List my areas")
def list_areas(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """All areas of the user with the number of plans and history rows using each."""
    return ok(glow_service.list_areas(db, current_user))


@router.post(
    "",
    response_model=ApiResponse[GlowAreaOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create an area",
)
def create_area(
    data: GlowAreaCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Area names are unique per user."""
    return ok(glow_service.create_area(db, current_user, data), "部位创建成功")


@router.get("/{area_id}", response_model=ApiResponse[GlowAreaDetail], summary="Get an area")
def get_area(
    area_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(glow_service.get_area(db, current_user, area_id))


@router.put("/{area_id}", response_model=ApiResponse[GlowAreaOut], summary="Rename an area")
def update_area(
    area_id: UUID,
    data: GlowAreaUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(glow_service.update_area(db, current_user, area_id, data), "部位更新成功")


@router.delete("/{area_id}", response_model=ApiResponse[None], summary="Delete an area")
def delete_area(
    area_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Refused while any plan still uses the area."""
    glow_service.delete_area(db, current_user, area_id)
    return ok(message="部位删除成功")
