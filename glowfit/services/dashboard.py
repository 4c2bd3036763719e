# services/dashboard.py
import csv
import io
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from glowfit.core.config import utc_now
from glowfit.core.exceptions import ValidationError
from glowfit.crud.fitness import crud_fitness_history, crud_fitness_item
from glowfit.crud.glow import crud_glow_history, crud_glow_plan
from glowfit.crud.notification import crud_notification
from glowfit.crud.reminder import crud_fitness_reminder, crud_glow_reminder
from glowfit.crud.user import crud_user
from glowfit.models.enums import PlanStatus
from glowfit.models.user import User


class ExportFormat(str, Enum):
    json = "json"
    csv = "csv"


# (header, row key) pairs; list values are joined in CSV cells
Columns = List[Tuple[str, str]]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _enum(value) -> Optional[str]:
    return value.value if value is not None else None


# =====================================================================
# ROW BUILDERS
# =====================================================================

def _owner_fields(user: User) -> Dict[str, Any]:
    return {"userEmail": user.email, "userName": user.name}


def _glow_plan_row(plan) -> Dict[str, Any]:
    return {
        "id": str(plan.id),
        "name": plan.name,
        "startDate": _iso(plan.start_date),
        "status": _enum(plan.status),
        "lastCompletedAt": _iso(plan.last_completed_at),
        "areas": [area.name for area in plan.areas],
        "devices": [device.name for device in plan.devices],
        "historyCount": plan.history_count,
        "reminderCount": plan.reminder_count,
        "createdAt": _iso(plan.created_at),
    }


def _fitness_item_row(item) -> Dict[str, Any]:
    return {
        "id": str(item.id),
        "name": item.name,
        "plannedDuration": item.planned_duration,
        "plannedSets": item.planned_sets,
        "plannedReps": item.planned_reps,
        "status": _enum(item.status),
        "lastCompletedAt": _iso(item.last_completed_at),
        "videos": [video.original_name for video in item.videos],
        "historyCount": item.history_count,
        "reminderCount": item.reminder_count,
        "createdAt": _iso(item.created_at),
    }


def _glow_history_row(history) -> Dict[str, Any]:
    return {
        "id": str(history.id),
        "planName": history.plan_name,
        "duration": history.duration,
        "completedAt": _iso(history.completed_at),
        "areas": [area.name for area in history.areas],
        "devices": [device.name for device in history.devices],
        "notes": history.notes,
    }


def _fitness_history_row(history) -> Dict[str, Any]:
    return {
        "id": str(history.id),
        "itemName": history.item_name,
        "duration": history.duration,
        "sets": history.sets,
        "reps": history.reps,
        "completedAt": _iso(history.completed_at),
        "notes": history.notes,
    }


def _notification_row(notification) -> Dict[str, Any]:
    return {
        "id": str(notification.id),
        "type": _enum(notification.type),
        "title": notification.title,
        "content": notification.content,
        "isRead": notification.is_read,
        "createdAt": _iso(notification.created_at),
    }


def _user_row(user: User) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": _enum(user.role),
        "status": _enum(user.status),
        "glowPlanCount": user.glow_plan_count,
        "fitnessItemCount": user.fitness_item_count,
        "notificationCount": user.notification_count,
        "createdAt": _iso(user.created_at),
    }


GLOW_PLAN_COLUMNS: Columns = [
    ("ID", "id"), ("计划名称", "name"), ("开始日期", "startDate"), ("状态", "status"),
    ("部位", "areas"), ("设备", "devices"), ("历史记录数", "historyCount"),
    ("提醒数", "reminderCount"), ("创建时间", "createdAt"),
]
FITNESS_ITEM_COLUMNS: Columns = [
    ("ID", "id"), ("运动名称", "name"), ("计划时长", "plannedDuration"),
    ("计划组数", "plannedSets"), ("计划次数", "plannedReps"), ("状态", "status"),
    ("视频", "videos"), ("历史记录数", "historyCount"), ("创建时间", "createdAt"),
]
GLOW_HISTORY_COLUMNS: Columns = [
    ("ID", "id"), ("计划名称", "planName"), ("时长", "duration"), ("完成时间", "completedAt"),
    ("部位", "areas"), ("设备", "devices"), ("备注", "notes"),
]
FITNESS_HISTORY_COLUMNS: Columns = [
    ("ID", "id"), ("运动名称", "itemName"), ("时长", "duration"), ("组数", "sets"),
    ("次数", "reps"), ("完成时间", "completedAt"), ("备注", "notes"),
]
NOTIFICATION_COLUMNS: Columns = [
    ("ID", "id"), ("类型", "type"), ("标题", "title"), ("内容", "content"),
    ("已读", "isRead"), ("创建时间", "createdAt"),
]
USER_COLUMNS: Columns = [
    ("ID", "id"), ("邮箱", "email"), ("姓名", "name"), ("角色", "role"), ("状态", "status"),
    ("焕肤计划数", "glowPlanCount"), ("运动条目数", "fitnessItemCount"),
    ("通知数", "notificationCount"), ("创建时间", "createdAt"),
]
OWNER_COLUMNS: Columns = [("用户邮箱", "userEmail"), ("用户姓名", "userName")]
PERSONAL_COLUMNS: Columns = [
    ("邮箱", "email"), ("姓名", "name"), ("焕肤计划数", "glowPlans"),
    ("活跃焕肤计划数", "activeGlowPlans"), ("运动条目数", "fitnessItems"),
    ("活跃运动条目数", "activeFitnessItems"), ("焕肤记录数", "glowSessions"),
    ("焕肤总时长", "glowDuration"), ("运动记录数", "fitnessSessions"),
    ("运动总时长", "fitnessDuration"), ("未读通知数", "unreadNotifications"),
    ("导出时间", "exportedAt"),
]


# =====================================================================
# CSV RENDERING
# =====================================================================

def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, bool):
        return "是" if value else "否"
    return str(value)


def render_csv(rows: List[Dict[str, Any]], columns: Columns) -> str:
    """UTF-8 CSV with a BOM so spreadsheet tools detect the encoding; every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([header for header, _ in columns])
    for row in rows:
        writer.writerow([_cell(row.get(key)) for _, key in columns])
    return "\ufeff" + buffer.getvalue()


def export_filename(export_type: str, fmt: ExportFormat) -> str:
    return f"{export_type.replace('-', '_')}_{utc_now().date().isoformat()}.{fmt.value}"


# =====================================================================
# SERVICE CLASS
# =====================================================================

class DashboardService:
    """Dashboard counters and data export."""

    # =====================================================================
    # STATS
    # =====================================================================

    def get_stats(self, db: Session, user: User) -> Dict[str, Any]:
        glow_reminders = crud_glow_reminder.count_active(db, user_id=user.id)
        fitness_reminders = crud_fitness_reminder.count_active(db, user_id=user.id)
        return {
            "glow_plans": {
                "total": crud_glow_plan.count(db, user_id=user.id),
                "active": crud_glow_plan.count(db, user_id=user.id, status=PlanStatus.ACTIVE),
            },
            "fitness_items": {
                "total": crud_fitness_item.count(db, user_id=user.id),
                "active": crud_fitness_item.count(db, user_id=user.id, status=PlanStatus.ACTIVE),
            },
            "notifications": {"unread": crud_notification.count_unread(db, user_id=user.id)},
            "reminders": {
                "total": glow_reminders + fitness_reminders,
                "glow": glow_reminders,
                "fitness": fitness_reminders,
            },
        }

    # =====================================================================
    # EXPORT
    # =====================================================================

    def _personal(self, db: Session, user: User) -> List[Dict[str, Any]]:
        stats = self.get_stats(db, user)
        glow = crud_glow_history.aggregate(db, user_id=user.id)
        fitness = crud_fitness_history.aggregate(db, user_id=user.id)
        return [{
            "id": str(user.id),
            "email": user.email,
            "name": user.name,
            "createdAt": _iso(user.created_at),
            "glowPlans": stats["glow_plans"]["total"],
            "activeGlowPlans": stats["glow_plans"]["active"],
            "fitnessItems": stats["fitness_items"]["total"],
            "activeFitnessItems": stats["fitness_items"]["active"],
            "glowSessions": glow["total_sessions"],
            "glowDuration": glow["total_duration"],
            "fitnessSessions": fitness["total_sessions"],
            "fitnessDuration": fitness["total_duration"],
            "unreadNotifications": stats["notifications"]["unread"],
            "activeReminders": stats["reminders"]["total"],
            "exportedAt": utc_now().isoformat(),
        }]

    def export_user_data(
        self, db: Session, user: User, export_type: str
    ) -> Tuple[List[Dict[str, Any]], Columns]:
        """
        Rows and CSV columns for one of the caller's data sets.

        Raises:
            ValidationError: On an unknown export type
        """
        exporters: Dict[str, Tuple[Callable[[], List[Dict[str, Any]]], Columns]] = {
            "personal": (lambda: self._personal(db, user), PERSONAL_COLUMNS),
            "glow-plans": (
                lambda: [_glow_plan_row(p) for p in crud_glow_plan.get_all(db, user_id=user.id)],
                GLOW_PLAN_COLUMNS,
            ),
            "fitness-items": (
                lambda: [_fitness_item_row(i) for i in crud_fitness_item.get_all(db, user_id=user.id)],
                FITNESS_ITEM_COLUMNS,
            ),
            "glow-history": (
                lambda: [_glow_history_row(h) for h in crud_glow_history.get_all(db, user_id=user.id)],
                GLOW_HISTORY_COLUMNS,
            ),
            "fitness-history": (
                lambda: [_fitness_history_row(h) for h in crud_fitness_history.get_all(db, user_id=user.id)],
                FITNESS_HISTORY_COLUMNS,
            ),
            "notifications": (
                lambda: [_notification_row(n) for n in crud_notification.get_all(db, user_id=user.id)],
                NOTIFICATION_COLUMNS,
            ),
        }
        if export_type not in exporters:
            raise ValidationError("不支持的导出类型")

        build, columns = exporters[export_type]
        return build(), columns

    def export_admin_data(
        self, db: Session, export_type: str
    ) -> Tuple[List[Dict[str, Any]], Columns]:
        """
        Rows and CSV columns across every user (admin only).

        Raises:
            ValidationError: On an unknown export type
        """
        if export_type == "users":
            return [_user_row(u) for u in crud_user.get_all(db)], USER_COLUMNS
        if export_type == "glow-plans":
            rows = [{**_glow_plan_row(p), **_owner_fields(p.user)} for p in crud_glow_plan.get_all(db)]
            return rows, GLOW_PLAN_COLUMNS[:2] + OWNER_COLUMNS + GLOW_PLAN_COLUMNS[2:]
        if export_type == "fitness-items":
            rows = [{**_fitness_item_row(i), **_owner_fields(i.user)} for i in crud_fitness_item.get_all(db)]
            return rows, FITNESS_ITEM_COLUMNS[:2] + OWNER_COLUMNS + FITNESS_ITEM_COLUMNS[2:]
        if export_type == "notifications":
            rows = [{**_notification_row(n), **_owner_fields(n.user)} for n in crud_notification.get_all(db)]
            return rows, NOTIFICATION_COLUMNS[:1] + OWNER_COLUMNS + NOTIFICATION_COLUMNS[1:]
        raise ValidationError("不支持的导出类型")


dashboard_service = DashboardService()
