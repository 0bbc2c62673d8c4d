# app/models/user.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from app.database import Base
from app.models.counter import new_id
from app.utils.dates import utcnow
from app.utils.roles import Role, STATUSES, normalize_role


class User(Base):
    __tablename__ = "users"
    __sequence__ = "user"
    __sequence_column__ = "uid"

    id = Column(String(32), primary_key=True, default=new_id)
    uid = Column(Integer, unique=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.EMPLOYEE.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    task_ledger = relationship(
        "UserTaskEntry",
        back_populates="user",
        foreign_keys="UserTaskEntry.user_id",
        order_by="UserTaskEntry.id",
        cascade="all, delete-orphan",
    )

    @validates("role")
    def _normalize_role(self, key, value):
        return normalize_role(value)

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("name")
    def _strip_name(self, key, value):
        return value.strip() if value else value

    # Ledger helpers (one ledger per user, entries keyed by task)

    def ledger_entry(self, task_id: str):
        for entry in self.task_ledger:
            if entry.task_id == task_id:
                return entry
        return None

    def add_ledger_task(self, task_id: str, assigned_by: str, status: str = "Todo"):
        """Add or refresh the ledger entry for a task"""
        entry = self.ledger_entry(task_id)
        if entry is None:
            entry = UserTaskEntry(task_id=task_id, assigned_by=assigned_by, status=status)
            self.task_ledger.append(entry)
        else:
            entry.status = status
            entry.assigned_by = assigned_by
            entry.assigned_at = utcnow()
        return entry

    def remove_ledger_task(self, task_id: str) -> bool:
        entry = self.ledger_entry(task_id)
        if entry is None:
            return False
        self.task_ledger.remove(entry)
        return True

    def ledger_tasks_by_status(self, status: str):
        return [entry for entry in self.task_ledger if entry.status == status]

    def __repr__(self):
        return f"<User(uid={self.uid}, email='{self.email}', role='{self.role}')>"


class UserTaskEntry(Base):
    __tablename__ = "user_task_entries"
    __table_args__ = (UniqueConstraint("user_id", "task_id", name="uq_user_task_entry"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    task_id = Column(String(32), ForeignKey("tasks.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=STATUSES[0])
    assigned_by = Column(String(32), ForeignKey("users.id"), nullable=False)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", foreign_keys=[user_id], back_populates="task_ledger")
    task = relationship("Task")
