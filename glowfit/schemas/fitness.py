# schemas/fitness.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from glowfit.models.enums import PlanStatus
from glowfit.schemas.common import CamelModel, Page, UTCDateTime
from glowfit.schemas.reminder import ReminderOut


# =====================================================================
# VIDEO SCHEMAS
# =====================================================================

class VideoRef(CamelModel):
    id: UUID
    filename: str
    original_name: str
    mime_type: str
    size: int
    url: str


class UserVideoOut(VideoRef):
    user_id: UUID
    created_at: datetime
    item_count: int = 0


class FitnessItemSummary(CamelModel):
    id: UUID
    name: str
    status: PlanStatus
    created_at: datetime


class UserVideoDetail(UserVideoOut):
    fitness_items: List[FitnessItemSummary] = []


# =====================================================================
# ITEM SCHEMAS
# =====================================================================

class FitnessItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    planned_duration: Optional[int] = Field(None, ge=1, le=480, description="Minutes")
    planned_sets: Optional[int] = Field(None, ge=1, le=100)
    planned_reps: Optional[int] = Field(None, ge=1, le=1000)
    video_ids: Optional[List[UUID]] = None


class FitnessItemUpdate(CamelModel):
    """Partial update. `videoIds` replaces the links when present, null clears them."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    planned_duration: Optional[int] = Field(None, ge=1, le=480)
    planned_sets: Optional[int] = Field(None, ge=1, le=100)
    planned_reps: Optional[int] = Field(None, ge=1, le=1000)
    status: Optional[PlanStatus] = None
    video_ids: Optional[List[UUID]] = None


class FitnessItemOut(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    planned_duration: Optional[int] = None
    planned_sets: Optional[int] = None
    planned_reps: Optional[int] = None
    status: PlanStatus
    last_completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    videos: List[VideoRef] = []
    history_count: int = 0
    reminder_count: int = 0
    video_count: int = 0


# =====================================================================
# HISTORY SCHEMAS
# =====================================================================

class FitnessCompleteRequest(CamelModel):
    duration: Optional[int] = Field(None, ge=1, le=480, description="Minutes")
    sets: Optional[int] = Field(None, ge=1, le=100)
    reps: Optional[int] = Field(None, ge=1, le=1000)
    notes: Optional[str] = Field(None, max_length=500)
    completed_at: Optional[UTCDateTime] = None


class FitnessHistoryOut(CamelModel):
    id: UUID
    item_id: UUID
    user_id: UUID
    item_name: Optional[str] = None
    duration: Optional[int] = None
    sets: Optional[int] = None
    reps: Optional[int] = None
    completed_at: datetime
    notes: Optional[str] = None
    created_at: datetime


class FitnessItemDetail(FitnessItemOut):
    reminders: List[ReminderOut] = Field(default_factory=list, validation_alias="active_reminders")
    history: List[FitnessHistoryOut] = Field(default_factory=list, validation_alias="recent_history")


class FitnessHistoryStats(CamelModel):
    total_sessions: int
    total_duration: int
    average_duration: int
    total_sets: int
    total_reps: int


class FitnessHistoryPage(Page[FitnessHistoryOut]):
    stats: FitnessHistoryStats
