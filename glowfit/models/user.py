# models/user.py

import uuid
from sqlalchemy import Column, String, DateTime, Uuid, Enum as SqlEnum
from sqlalchemy.orm import relationship

from glowfit.core.config import Base, utc_now
from glowfit.models.enums import UserRole, UserStatus


class User(Base):
    __tablename__ = "users"

    # ---- Base fields ----
    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SqlEnum(UserRole), nullable=False, default=UserRole.USER)

    # ---- Account status ----
    status = Column(SqlEnum(UserStatus), nullable=False, default=UserStatus.ACTIVE)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
    last_login_at = Column(DateTime, nullable=True)
    password_changed_at = Column(DateTime, nullable=True)

    # ---- Relationships ----
    glow_areas = relationship("GlowArea", back_populates="user", cascade="all, delete-orphan")
    glow_devices = relationship("GlowDevice", back_populates="user", cascade="all, delete-orphan")
    glow_plans = relationship("GlowPlan", back_populates="user", cascade="all, delete-orphan")
    fitness_items = relationship("FitnessItem", back_populates="user", cascade="all, delete-orphan")
    videos = relationship("UserVideo", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def glow_plan_count(self) -> int:
        return len(self.glow_plans)

    @property
    def fitness_item_count(self) -> int:
        return len(self.fitness_items)

    @property
    def notification_count(self) -> int:
        return len(self.notifications)
