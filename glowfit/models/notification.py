# models/notification.py

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Uuid, Enum as SqlEnum
from sqlalchemy.orm import relationship

from glowfit.core.config import Base, utc_now
from glowfit.models.enums import NotificationType


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SqlEnum(NotificationType), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    content = Column(String(500), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    related_id = Column(Uuid, nullable=True)  # plan / item the notification is about
    created_at = Column(DateTime, default=utc_now, index=True)

    user = relationship("User", back_populates="notifications")
