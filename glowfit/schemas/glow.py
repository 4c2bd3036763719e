# schemas/glow.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from glowfit.models.enums import PlanStatus
from glowfit.schemas.common import CamelModel, Page, UTCDateTime
from glowfit.schemas.reminder import ReminderOut


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        return None
    return v


# =====================================================================
# AREA SCHEMAS
# =====================================================================

class GlowAreaCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)


class GlowAreaUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)


class GlowAreaRef(CamelModel):
    id: UUID
    name: str


class PlanSummary(CamelModel):
    id: UUID
    name: str
    status: PlanStatus
    created_at: datetime


class GlowAreaOut(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    created_at: datetime
    plan_count: int = 0
    history_count: int = 0


class GlowAreaDetail(GlowAreaOut):
    plans: List[PlanSummary] = []


# =====================================================================
# DEVICE SCHEMAS
# =====================================================================

class GlowDeviceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    model: Optional[str] = Field(None, max_length=100)

    @field_validator("model")
    @classmethod
    def blank_model_to_none(cls, v):
        return _blank_to_none(v)


class GlowDeviceUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, max_length=100)

    @field_validator("model")
    @classmethod
    def blank_model_to_none(cls, v):
        return _blank_to_none(v)


class GlowDeviceRef(CamelModel):
    id: UUID
    name: str
    model: Optional[str] = None


class GlowDeviceOut(GlowDeviceRef):
    user_id: UUID
    created_at: datetime
    plan_count: int = 0
    history_count: int = 0


class GlowDeviceDetail(GlowDeviceOut):
    plans: List[PlanSummary] = []


# =====================================================================
# PLAN SCHEMAS
# =====================================================================

class GlowPlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    start_date: UTCDateTime
    area_ids: Optional[List[UUID]] = None
    device_ids: Optional[List[UUID]] = None


class GlowPlanUpdate(CamelModel):
    """Partial update. Link lists replace the current links when present."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[UTCDateTime] = None
    status: Optional[PlanStatus] = None
    area_ids: Optional[List[UUID]] = None
    device_ids: Optional[List[UUID]] = None


class GlowPlanOut(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    start_date: datetime
    status: PlanStatus
    last_completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    areas: List[GlowAreaRef] = []
    devices: List[GlowDeviceRef] = []
    history_count: int = 0
    reminder_count: int = 0


# =====================================================================
# HISTORY SCHEMAS
# =====================================================================

class GlowCompleteRequest(CamelModel):
    duration: Optional[int] = Field(None, ge=1, le=480, description="Minutes")
    notes: Optional[str] = Field(None, max_length=500)
    completed_at: Optional[UTCDateTime] = None
    area_ids: Optional[List[UUID]] = None
    device_ids: Optional[List[UUID]] = None


class HistoryAreaRef(CamelModel):
    """Area as it was when the session was recorded; `id` is null once the area is deleted."""
    id: Optional[UUID] = Field(None, validation_alias="area_id")
    name: str


class HistoryDeviceRef(CamelModel):
    id: Optional[UUID] = Field(None, validation_alias="device_id")
    name: str
    model: Optional[str] = None


class GlowHistoryOut(CamelModel):
    id: UUID
    plan_id: UUID
    user_id: UUID
    plan_name: Optional[str] = None
    duration: Optional[int] = None
    completed_at: datetime
    notes: Optional[str] = None
    created_at: datetime
    areas: List[HistoryAreaRef] = []
    devices: List[HistoryDeviceRef] = []


class GlowPlanDetail(GlowPlanOut):
    reminders: List[ReminderOut] = Field(default_factory=list, validation_alias="active_reminders")
    history: List[GlowHistoryOut] = Field(default_factory=list, validation_alias="recent_history")


class HistoryStats(CamelModel):
    total_sessions: int
    total_duration: int
    average_duration: int


class GlowHistoryPage(Page[GlowHistoryOut]):
    stats: HistoryStats
