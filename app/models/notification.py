# app/models/notification.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.dates import utcnow
import enum

class NotificationType(str, enum.Enum):
    TASK_ASSIGNED = "task-assigned"
    TASK_UNASSIGNED = "task-unassigned"
    TASK_STATUS_CHANGED = "task-status-changed"
    TASK_COMPLETED = "task-completed"
    TASK_REOPENED = "task-reopened"
    TASK_COMMENTED = "task-commented"
    GROUP_MEMBER_ADDED = "group-member-added"
    GROUP_TASK_ADDED = "group-task-added"
    SYSTEM = "system"

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False, default=NotificationType.SYSTEM.value)
    message = Column(Text, nullable=False)
    link = Column(String(255), nullable=True)  # e.g. '/tasks/123'
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    read_at = Column(DateTime, nullable=True)

    # Relationships
    user = relationship("User")

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type='{self.type}')>"
