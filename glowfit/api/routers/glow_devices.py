# glowfit/api/routers/glow_devices.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.schemas.glow import (
    GlowDeviceCreate,
    GlowDeviceDetail,
    GlowDeviceOut,
    GlowDeviceUpdate,
)
from glowfit.services.glow import glow_service

router = APIRouter(prefix="/api/glow-devices", tags=["Glow Devices"])


@router.get("", response_model=ApiResponse[List[GlowDeviceOut]], summary="List my devices")
def list_devices(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return ok(glow_service.list_devices(db, current_user))


@router.post(
    "",
    response_model=ApiResponse[GlowDeviceOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create a device",
)
def create_device(
    data: GlowDeviceCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Device names are unique per user; a blank model is stored as null."""
    return ok(glow_service.create_device(db, current_user, data), "设备创建成功")


@router.get("/{device_id}", response_model=ApiResponse[GlowDeviceDetail], summary="Get a device")
def get_device(
    device_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(glow_service.get_device(db, current_user, device_id))


@router.put("/{device_id}", response_model=ApiResponse[GlowDeviceOut], summary="Update a device")
def update_device(
    device_id: UUID,
    data: GlowDeviceUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(glow_service.update_device(db, current_user, device_id, data), "设备更新成功")


@router.delete("/{device_id}", response_model=ApiResponse[None], summary="Delete a device")
def delete_device(
    device_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Refused while any plan still uses the device."""
    glow_service.delete_device(db, current_user, device_id)
    return ok(message="设备删除成功")
