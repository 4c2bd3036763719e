# models/enums.py
import enum


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class PlanStatus(str, enum.Enum):
    """Lifecycle shared by glow plans and fitness items."""
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ReminderFrequency(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    CUSTOM = "CUSTOM"


class NotificationType(str, enum.Enum):
    GLOW_REMINDER = "GLOW_REMINDER"
    FITNESS_REMINDER = "FITNESS_REMINDER"
    SYSTEM = "SYSTEM"
    ACHIEVEMENT = "ACHIEVEMENT"
