# models/glow.py

import uuid
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, ForeignKey, JSON, Uuid,
    UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship

from glowfit.core.config import Base, utc_now
from glowfit.models.enums import PlanStatus, ReminderFrequency


class GlowArea(Base):
    __tablename__ = "glow_areas"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_glow_area_user_name"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime, default=utc_now)

    user = relationship("User", back_populates="glow_areas")
    plan_links = relationship("GlowPlanArea", back_populates="area", cascade="all, delete-orphan")
    # history keeps its own name snapshot; deleting the area only unlinks it
    history_links = relationship("GlowHistoryArea", back_populates="area")

    @property
    def plans(self):
        return [link.plan for link in self.plan_links]

    @property
    def plan_count(self) -> int:
        return len(self.plan_links)

    @property
    def history_count(self) -> int:
        return len(self.history_links)


class GlowDevice(Base):
    __tablename__ = "glow_devices"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_glow_device_user_name"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    model = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=utc_now)

    user = relationship("User", back_populates="glow_devices")
    plan_links = relationship("GlowPlanDevice", back_populates="device", cascade="all, delete-orphan")
    history_links = relationship("GlowHistoryDevice", back_populates="device")

    @property
    def plans(self):
        return [link.plan for link in self.plan_links]

    @property
    def plan_count(self) -> int:
        return len(self.plan_links)

    @property
    def history_count(self) -> int:
        return len(self.history_links)


class GlowPlan(Base):
    __tablename__ = "glow_plans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    start_date = Column(DateTime, nullable=False)
    status = Column(SqlEnum(PlanStatus), nullable=False, default=PlanStatus.ACTIVE, index=True)
    # stamped by the conditional update that guards each completion
    last_completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="glow_plans")
    area_links = relationship("GlowPlanArea", back_populates="plan", cascade="all, delete-orphan")
    device_links = relationship("GlowPlanDevice", back_populates="plan", cascade="all, delete-orphan")
    history = relationship(
        "GlowHistory", back_populates="plan", cascade="all, delete-orphan",
        order_by="GlowHistory.completed_at.desc()",
    )
    reminders = relationship("GlowReminder", back_populates="plan", cascade="all, delete-orphan")

    @property
    def areas(self):
        return [link.area for link in self.area_links]

    @property
    def devices(self):
        return [link.device for link in self.device_links]

    @property
    def active_reminders(self):
        return [r for r in self.reminders if r.is_active]

    @property
    def recent_history(self):
        return self.history[:10]

    @property
    def history_count(self) -> int:
        return len(self.history)

    @property
    def reminder_count(self) -> int:
        return len(self.reminders)


class GlowPlanArea(Base):
    __tablename__ = "glow_plan_areas"
    __table_args__ = (UniqueConstraint("plan_id", "area_id", name="uq_glow_plan_area"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("glow_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    area_id = Column(Uuid, ForeignKey("glow_areas.id", ondelete="CASCADE"), nullable=False, index=True)

    plan = relationship("GlowPlan", back_populates="area_links")
    area = relationship("GlowArea", back_populates="plan_links")


class GlowPlanDevice(Base):
    __tablename__ = "glow_plan_devices"
    __table_args__ = (UniqueConstraint("plan_id", "device_id", name="uq_glow_plan_device"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("glow_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(Uuid, ForeignKey("glow_devices.id", ondelete="CASCADE"), nullable=False, index=True)

    plan = relationship("GlowPlan", back_populates="device_links")
    device = relationship("GlowDevice", back_populates="plan_links")


class GlowHistory(Base):
    __tablename__ = "glow_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    plan_id = Column(Uuid, ForeignKey("glow_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    duration = Column(Integer, nullable=True)  # minutes
    completed_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now)

    plan = relationship("GlowPlan", back_populates="history")
    area_links = relationship("GlowHistoryArea", back_populates="history", cascade="all, delete-orphan")
    device_links = relationship("GlowHistoryDevice", back_populates="history", cascade="all, delete-orphan")

    @property
    def plan_name(self):
        return self.plan.name if self.plan else None

    @property
    def areas(self):
        return self.area_links

    @property
    def devices(self):
        return self.device_links


class GlowHistoryArea(Base):
    __tablename__ = "glow_history_areas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    history_id = Column(Uuid, ForeignKey("glow_history.id", ondelete="CASCADE"), nullable=False, index=True)
    area_id = Column(Uuid, ForeignKey("glow_areas.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(50), nullable=False)

    history = relationship("GlowHistory", back_populates="area_links")
    area = relationship("GlowArea", back_populates="history_links")


class GlowHistoryDevice(Base):
    __tablename__ = "glow_history_devices"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    history_id = Column(Uuid, ForeignKey("glow_history.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(Uuid, ForeignKey("glow_devices.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    model = Column(String(100), nullable=True)

    history = relationship("GlowHistory", back_populates="device_links")
    device = relationship("GlowDevice", back_populates="history_links")


class GlowReminder(Base):
    __tablename__ = "glow_reminders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    plan_id = Column(Uuid, ForeignKey("glow_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    frequency = Column(SqlEnum(ReminderFrequency), nullable=False)
    interval = Column(Integer, nullable=False, default=1)
    time = Column(String(5), nullable=False)  # "HH:mm" in the reminder time zone
    weekdays = Column(JSON, nullable=True)  # ISO weekdays, 1 = Monday
    next_reminder = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    plan = relationship("GlowPlan", back_populates="reminders")

    @property
    def owner_id(self):
        return self.plan_id

    @property
    def owner(self):
        return self.plan
