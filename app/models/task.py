from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.counter import new_id
from app.utils.dates import utcnow
from app.utils.roles import TaskStatus, TaskPriority, TERMINAL_STATUSES


class HistoryKind:
    STATUS = "status"
    REASSIGNMENT = "reassignment"
    REOPEN = "reopen"


class Task(Base):
    __tablename__ = "tasks"
    __sequence__ = "task"
    __sequence_column__ = "tid"
    __table_args__ = (
        # Assignment is a tagged union: a user, a group, or nothing
        CheckConstraint(
            "assigned_user_id IS NULL OR assigned_group_id IS NULL",
            name="ck_tasks_single_assignee",
        ),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    tid = Column(Integer, unique=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    due = Column(DateTime, nullable=True)
    attachments = Column(JSON, nullable=False, default=list)

    created_by = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    assigned_user_id = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)
    assigned_group_id = Column(String(32), ForeignKey("groups.id"), nullable=True, index=True)

    # Current status record
    status = Column(String, nullable=False, default=TaskStatus.TODO.value, index=True)
    status_updated_at = Column(DateTime, default=utcnow, nullable=False)
    status_updated_by = Column(String(32), ForeignKey("users.id"), nullable=True)

    completed_at = Column(DateTime, nullable=True)
    reopened = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    creator = relationship("User", foreign_keys=[created_by])
    history = relationship(
        "TaskHistory",
        back_populates="task",
        order_by="TaskHistory.id",
        cascade="all, delete-orphan",
    )
    comments = relationship(
        "TaskComment",
        back_populates="task",
        order_by="TaskComment.id",
        cascade="all, delete-orphan",
    )

    def __init__(self, **kwargs):
        # New tasks start in Todo, attributed to their creator
        kwargs.setdefault("id", new_id())
        kwargs.setdefault("status", TaskStatus.TODO.value)
        kwargs.setdefault("status_updated_at", utcnow())
        kwargs.setdefault("priority", TaskPriority.MEDIUM.value)
        kwargs.setdefault("attachments", [])
        kwargs.setdefault("reopened", False)
        super().__init__(**kwargs)
        if self.status_updated_by is None:
            self.status_updated_by = self.created_by

    @property
    def assigned_to(self) -> dict:
        return {"user": self.assigned_user_id, "group": self.assigned_group_id}

    @property
    def current_status(self) -> dict:
        return {
            "status": self.status,
            "updated_at": self.status_updated_at,
            "updated_by": self.status_updated_by,
        }

    @property
    def status_history(self):
        return list(self.history)

    def is_user_assigned(self, user_id: str) -> bool:
        return self.assigned_user_id is not None and self.assigned_user_id == user_id

    def is_assigned(self) -> bool:
        return self.assigned_user_id is not None or self.assigned_group_id is not None

    def update_status(self, new_status, updated_by: str, comment: str = None) -> bool:
        """Move to ``new_status``; returns False when nothing changed.

        The superseded status record is pushed onto the history before the new
        one is applied. A transition to the current status records nothing.
        """
        new_status = TaskStatus(new_status).value
        if self.status == new_status:
            return False

        self.history.append(TaskHistory(
            kind=HistoryKind.STATUS,
            status=self.status,
            updated_at=self.status_updated_at,
            updated_by=self.status_updated_by,
            comment=comment,
        ))

        now = utcnow()
        self.status = new_status
        self.status_updated_at = now
        self.status_updated_by = updated_by

        if new_status == TaskStatus.COMPLETED.value:
            self.completed_at = now
        elif new_status != TaskStatus.CLOSED.value:
            self.completed_at = None
        return True

    def reopen(self, updated_by: str, comment: str = None):
        if self.status not in TERMINAL_STATUSES:
            raise ValueError("Only completed or closed tasks can be reopened")

        self.history.append(TaskHistory(
            kind=HistoryKind.REOPEN,
            status=self.status,
            updated_at=self.status_updated_at,
            updated_by=self.status_updated_by,
            comment=f"Reopened: {comment}" if comment else "Reopened",
        ))
        self.status = TaskStatus.TODO.value
        self.status_updated_at = utcnow()
        self.status_updated_by = updated_by
        self.completed_at = None
        self.reopened = True

    def assign_user(self, user_id: str):
        self.assigned_user_id = user_id
        self.assigned_group_id = None

    def assign_group(self, group_id: str):
        self.assigned_user_id = None
        self.assigned_group_id = group_id

    def remove_assignment(self):
        self.assigned_user_id = None
        self.assigned_group_id = None

    def record_reassignment(self, updated_by: str, comment: str):
        self.history.append(TaskHistory(
            kind=HistoryKind.REASSIGNMENT,
            status=self.status,
            updated_at=utcnow(),
            updated_by=updated_by,
            comment=comment,
        ))

    def add_comment(self, user_id: str, text: str) -> "TaskComment":
        comment = TaskComment(user_id=user_id, comment=text.strip(), created_at=utcnow())
        self.comments.append(comment)
        return comment

    def recent_comments(self, limit: int = 10):
        # Comments are append-only, so list order is chronological
        return list(reversed(self.comments))[:limit]

    def __repr__(self):
        return f"<Task(tid={self.tid}, title='{self.title}', status='{self.status}')>"


class TaskHistory(Base):
    __tablename__ = "task_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(String(32), ForeignKey("tasks.id"), nullable=False, index=True)
    kind = Column(String(20), nullable=False, default=HistoryKind.STATUS)
    status = Column(String, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
    updated_by = Column(String(32), ForeignKey("users.id"), nullable=True)
    comment = Column(Text, nullable=True)

    task = relationship("Task", back_populates="history")


class TaskComment(Base):
    __tablename__ = "task_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(String(32), ForeignKey("tasks.id"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    comment = Column(String(1000), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    task = relationship("Task", back_populates="comments")
