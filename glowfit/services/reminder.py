# services/reminder.py
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from glowfit.core.config import settings, utc_now
from glowfit.core.exceptions import NotFoundError, ServiceError
from glowfit.crud.fitness import crud_fitness_item
from glowfit.crud.glow import crud_glow_plan
from glowfit.crud.notification import crud_notification
from glowfit.crud.reminder import CRUDReminder, Reminder, crud_fitness_reminder, crud_glow_reminder
from glowfit.models.enums import NotificationType, PlanStatus, ReminderFrequency
from glowfit.models.user import User
from glowfit.schemas.common import PaginationParams
from glowfit.schemas.reminder import ReminderSchedule, ReminderUpdate

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = ("frequency", "interval", "time", "weekdays")


# =====================================================================
# SCHEDULE CALCULATION
# =====================================================================

def _at(day, hour: int, minute: int, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def calculate_next_reminder(
    frequency: ReminderFrequency,
    interval: int,
    time_of_day: str,
    weekdays: Optional[List[int]] = None,
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> datetime:
    """
    Next firing time after `now`, as naive UTC.

    `time_of_day` ("HH:mm") and `weekdays` (ISO, 1 = Monday) are read in
    the reminder time zone.

    - DAILY: today at the time if still ahead, otherwise `interval` days later
    - WEEKLY: `interval` weeks after today, at the time
    - CUSTOM: the next listed weekday at the time; DAILY/1 without weekdays
    """
    tz = ZoneInfo(tz_name or settings.REMINDER_TIMEZONE)
    now = now or utc_now()
    local_now = now.replace(tzinfo=timezone.utc).astimezone(tz)
    hour, minute = (int(part) for part in time_of_day.split(":"))
    today = local_now.date()
    today_at = _at(today, hour, minute, tz)

    if frequency == ReminderFrequency.WEEKLY:
        candidate = _at(today + timedelta(weeks=interval), hour, minute, tz)
    elif frequency == ReminderFrequency.CUSTOM and weekdays:
        # offset 7 is the same weekday next week, so a match always exists
        candidate = next(
            _at(today + timedelta(days=offset), hour, minute, tz)
            for offset in range(8)
            if (today + timedelta(days=offset)).isoweekday() in weekdays
            and _at(today + timedelta(days=offset), hour, minute, tz) > local_now
        )
    else:
        step = interval if frequency == ReminderFrequency.DAILY else 1
        if today_at > local_now:
            candidate = today_at
        else:
            candidate = _at(today + timedelta(days=step), hour, minute, tz)

    return candidate.astimezone(timezone.utc).replace(tzinfo=None)


def advance_reminder(reminder: Reminder, now: datetime) -> datetime:
    """Next firing time strictly after both `now` and the current next_reminder."""
    base = max(now, reminder.next_reminder)
    return calculate_next_reminder(
        reminder.frequency, reminder.interval, reminder.time, reminder.weekdays, now=base
    )


# =====================================================================
# SERVICE CLASS
# =====================================================================

class ReminderService:
    """Reminder CRUD for one owner kind (glow plans or fitness items)."""

    def __init__(self, crud: CRUDReminder, owner_crud, owner_missing: str):
        self.crud = crud
        self.owner_crud = owner_crud
        self.owner_missing = owner_missing

    def _check_owner(self, db: Session, user: User, owner_id: UUID) -> None:
        if not self.owner_crud.get_owned(db, id=owner_id, user_id=user.id):
            raise NotFoundError(self.owner_missing)

    def list_reminders(
        self,
        db: Session,
        user: User,
        params: PaginationParams,
        owner_id: Optional[UUID] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Reminder], int]:
        return self.crud.get_multi_by_user(
            db, user_id=user.id, params=params, owner_id=owner_id, is_active=is_active
        )

    def get_reminder(self, db: Session, user: User, reminder_id: UUID) -> Reminder:
        reminder = self.crud.get_owned(db, id=reminder_id, user_id=user.id)
        if not reminder:
            raise NotFoundError("提醒不存在")
        return reminder

    def create_reminder(
        self, db: Session, user: User, owner_id: UUID, data: ReminderSchedule
    ) -> Reminder:
        """
        Raises:
            NotFoundError: If the plan/item is missing or not the user's
        """
        self._check_owner(db, user, owner_id)
        schedule = data.model_dump(include=set(SCHEDULE_FIELDS))
        next_reminder = calculate_next_reminder(
            data.frequency, data.interval, data.time, data.weekdays
        )
        return self.crud.create(
            db, user_id=user.id, owner_id=owner_id, schedule=schedule, next_reminder=next_reminder
        )

    def update_reminder(
        self, db: Session, user: User, reminder_id: UUID, data: ReminderUpdate
    ) -> Reminder:
        """Recomputes next_reminder when any schedule field changes."""
        reminder = self.get_reminder(db, user, reminder_id)
        update_data: Dict[str, Any] = data.model_dump(exclude_unset=True)
        for field in ("frequency", "interval", "time", "is_active"):
            if update_data.get(field, 0) is None:
                update_data.pop(field)

        if any(field in update_data for field in SCHEDULE_FIELDS):
            merged = {field: getattr(reminder, field) for field in SCHEDULE_FIELDS}
            merged.update({k: v for k, v in update_data.items() if k in SCHEDULE_FIELDS})
            update_data["next_reminder"] = calculate_next_reminder(
                merged["frequency"], merged["interval"], merged["time"], merged["weekdays"]
            )

        return self.crud.update(db, db_obj=reminder, update_data=update_data)

    def delete_reminder(self, db: Session, user: User, reminder_id: UUID) -> None:
        reminder = self.get_reminder(db, user, reminder_id)
        self.crud.remove(db, db_obj=reminder)


glow_reminder_service = ReminderService(crud_glow_reminder, crud_glow_plan, "计划不存在")
fitness_reminder_service = ReminderService(crud_fitness_reminder, crud_fitness_item, "运动条目不存在")


# =====================================================================
# DISPATCH & CLEANUP
# =====================================================================

def dispatch_due_reminders(db: Session, now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Turn every due, active reminder into a notification and move its
    next_reminder forward. Reminders of plans/items that are not ACTIVE are
    advanced without notifying.

    Raises:
        ServiceError: If the batch cannot be committed; nothing is persisted
    """
    now = now or utc_now()
    counts = {"glow": 0, "fitness": 0}

    try:
        for reminder in crud_glow_reminder.get_due(db, now=now):
            plan = reminder.plan
            if plan is not None and plan.status == PlanStatus.ACTIVE:
                crud_notification.create(
                    db,
                    user_id=reminder.user_id,
                    type=NotificationType.GLOW_REMINDER,
                    title="护理提醒",
                    content=f"该进行「{plan.name}」护理了",
                    related_id=plan.id,
                    commit=False,
                )
                counts["glow"] += 1
            reminder.next_reminder = advance_reminder(reminder, now)

        for reminder in crud_fitness_reminder.get_due(db, now=now):
            item = reminder.item
            if item is not None and item.status == PlanStatus.ACTIVE:
                crud_notification.create(
                    db,
                    user_id=reminder.user_id,
                    type=NotificationType.FITNESS_REMINDER,
                    title="运动提醒",
                    content=f"该进行「{item.name}」运动了",
                    related_id=item.id,
                    commit=False,
                )
                counts["fitness"] += 1
            reminder.next_reminder = advance_reminder(reminder, now)

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Reminder dispatch failed: {e}")
        raise ServiceError("提醒发送失败")

    counts["dispatched"] = counts["glow"] + counts["fitness"]
    logger.info(
        f"Dispatched {counts['dispatched']} reminders "
        f"(glow={counts['glow']}, fitness={counts['fitness']})"
    )
    return counts


def cleanup_notifications(db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Delete read notifications older than the retention window."""
    cutoff = (now or utc_now()) - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
    deleted = crud_notification.remove_read_before(db, cutoff=cutoff)
    logger.info(f"Removed {deleted} read notifications created before {cutoff.isoformat()}")
    return {"deleted": deleted, "cutoff": cutoff}
