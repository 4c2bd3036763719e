# schemas/dashboard.py
from glowfit.schemas.common import CamelModel


class TotalActive(CamelModel):
    total: int
    active: int


class UnreadCount(CamelModel):
    unread: int


class ReminderCounts(CamelModel):
    total: int
    glow: int
    fitness: int


class DashboardStats(CamelModel):
    glow_plans: TotalActive
    fitness_items: TotalActive
    notifications: UnreadCount
    reminders: ReminderCounts
