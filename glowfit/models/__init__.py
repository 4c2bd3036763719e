# glowfit/models/__init__.py

from glowfit.core.config import Base

# Import all models here so metadata.create_all and app-wide imports see them
from .enums import UserRole, UserStatus, PlanStatus, ReminderFrequency, NotificationType
from .user import User
from .glow import (
    GlowArea,
    GlowDevice,
    GlowPlan,
    GlowPlanArea,
    GlowPlanDevice,
    GlowHistory,
    GlowHistoryArea,
    GlowHistoryDevice,
    GlowReminder,
)
from .fitness import UserVideo, FitnessItem, FitnessItemVideo, FitnessHistory, FitnessReminder
from .notification import Notification

__all__ = [
    "Base",
    "UserRole", "UserStatus", "PlanStatus", "ReminderFrequency", "NotificationType",
    "User",
    "GlowArea", "GlowDevice", "GlowPlan", "GlowPlanArea", "GlowPlanDevice",
    "GlowHistory", "GlowHistoryArea", "GlowHistoryDevice", "GlowReminder",
    "UserVideo", "FitnessItem", "FitnessItemVideo", "FitnessHistory", "FitnessReminder",
    "Notification",
]
