# schemas/reminder.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator
from typing_extensions import Annotated

from glowfit.models.enums import PlanStatus, ReminderFrequency
from glowfit.schemas.common import CamelModel

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

Weekday = Annotated[int, Field(ge=1, le=7)]


def _normalize_weekdays(v: Optional[List[int]]) -> Optional[List[int]]:
    if v is None:
        return None
    return sorted(set(v))


# =====================================================================
# CREATE / UPDATE SCHEMAS
# =====================================================================

class ReminderSchedule(CamelModel):
    """Schedule fields shared by glow and fitness reminders."""
    frequency: ReminderFrequency
    interval: int = Field(1, ge=1, le=365)
    time: str = Field(..., pattern=TIME_PATTERN, description="HH:mm in the reminder time zone")
    weekdays: Optional[List[Weekday]] = Field(None, description="ISO weekdays, 1 = Monday")

    @field_validator("weekdays")
    @classmethod
    def dedupe_weekdays(cls, v):
        return _normalize_weekdays(v)


class GlowReminderCreate(ReminderSchedule):
    plan_id: UUID


class FitnessReminderCreate(ReminderSchedule):
    item_id: UUID


class ReminderUpdate(CamelModel):
    frequency: Optional[ReminderFrequency] = None
    interval: Optional[int] = Field(None, ge=1, le=365)
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    weekdays: Optional[List[Weekday]] = None
    is_active: Optional[bool] = None

    @field_validator("weekdays")
    @classmethod
    def dedupe_weekdays(cls, v):
        return _normalize_weekdays(v)


# =====================================================================
# READ SCHEMAS
# =====================================================================

class OwnerSummary(CamelModel):
    id: UUID
    name: str
    status: PlanStatus


class ReminderOut(CamelModel):
    id: UUID
    user_id: UUID
    frequency: ReminderFrequency
    interval: int
    time: str
    weekdays: Optional[List[int]] = None
    next_reminder: datetime
    is_active: bool
    created_at: datetime


class GlowReminderOut(ReminderOut):
    plan_id: UUID
    plan: Optional[OwnerSummary] = None


class FitnessReminderOut(ReminderOut):
    item_id: UUID
    item: Optional[OwnerSummary] = None


class DispatchResult(CamelModel):
    dispatched: int
    glow: int
    fitness: int
