# models/fitness.py

import uuid
from sqlalchemy import (
    Column, String, Text, Integer, BigInteger, Boolean, DateTime, ForeignKey, JSON, Uuid,
    UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship

from glowfit.core.config import Base, utc_now
from glowfit.models.enums import PlanStatus, ReminderFrequency


class UserVideo(Base):
    __tablename__ = "user_videos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(BigInteger, nullable=False)
    path = Column(String(1024), nullable=False)
    url = Column(String(1024), nullable=False)
    created_at = Column(DateTime, default=utc_now)

    user = relationship("User", back_populates="videos")
    item_links = relationship("FitnessItemVideo", back_populates="video", cascade="all, delete-orphan")

    @property
    def fitness_items(self):
        return [link.item for link in self.item_links]

    @property
    def item_count(self) -> int:
        return len(self.item_links)


class FitnessItem(Base):
    __tablename__ = "fitness_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    planned_duration = Column(Integer, nullable=True)  # minutes
    planned_sets = Column(Integer, nullable=True)
    planned_reps = Column(Integer, nullable=True)
    status = Column(SqlEnum(PlanStatus), nullable=False, default=PlanStatus.ACTIVE, index=True)
    last_completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="fitness_items")
    video_links = relationship("FitnessItemVideo", back_populates="item", cascade="all, delete-orphan")
    history = relationship(
        "FitnessHistory", back_populates="item", cascade="all, delete-orphan",
        order_by="FitnessHistory.completed_at.desc()",
    )
    reminders = relationship("FitnessReminder", back_populates="item", cascade="all, delete-orphan")

    @property
    def videos(self):
        return [link.video for link in self.video_links]

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

    @property
    def video_count(self) -> int:
        return len(self.video_links)


class FitnessItemVideo(Base):
    __tablename__ = "fitness_item_videos"
    __table_args__ = (UniqueConstraint("item_id", "video_id", name="uq_fitness_item_video"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    item_id = Column(Uuid, ForeignKey("fitness_items.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(Uuid, ForeignKey("user_videos.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utc_now)

    item = relationship("FitnessItem", back_populates="video_links")
    video = relationship("UserVideo", back_populates="item_links")


class FitnessHistory(Base):
    __tablename__ = "fitness_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    item_id = Column(Uuid, ForeignKey("fitness_items.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    duration = Column(Integer, nullable=True)
    sets = Column(Integer, nullable=True)
    reps = Column(Integer, nullable=True)
    completed_at = Column(DateTime, nullable=False, default=utc_now, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now)

    item = relationship("FitnessItem", back_populates="history")

    @property
    def item_name(self):
        return self.item.name if self.item else None


class FitnessReminder(Base):
    __tablename__ = "fitness_reminders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    item_id = Column(Uuid, ForeignKey("fitness_items.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    frequency = Column(SqlEnum(ReminderFrequency), nullable=False)
    interval = Column(Integer, nullable=False, default=1)
    time = Column(String(5), nullable=False)
    weekdays = Column(JSON, nullable=True)
    next_reminder = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    item = relationship("FitnessItem", back_populates="reminders")

    @property
    def owner_id(self):
        return self.item_id

    @property
    def owner(self):
        return self.item
