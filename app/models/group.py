# app/models/group.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Table, UniqueConstraint, event
from sqlalchemy.orm import relationship, Session
from app.database import Base
from app.models.counter import new_id
from app.utils.dates import utcnow
from app.utils.roles import STATUSES

# Association table for many-to-many relationship between groups and users
group_members = Table(
    'group_members',
    Base.metadata,
    Column('group_id', String(32), ForeignKey('groups.id'), primary_key=True),
    Column('user_id', String(32), ForeignKey('users.id'), primary_key=True)
)


class Group(Base):
    __tablename__ = "groups"
    __sequence__ = "group"
    __sequence_column__ = "gid"

    id = Column(String(32), primary_key=True, default=new_id)
    gid = Column(Integer, unique=True, index=True)
    title = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    lead_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    created_by = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    lead = relationship("User", foreign_keys=[lead_id])
    members = relationship("User", secondary=group_members, backref="groups", order_by="User.uid")
    tasks = relationship(
        "GroupTask",
        back_populates="group",
        order_by="GroupTask.id",
        cascade="all, delete-orphan",
    )

    @property
    def member_ids(self):
        return [member.id for member in self.members]

    def set_members(self, members, lead):
        """Replace the member set; duplicates are dropped and the lead is always kept"""
        unique = []
        seen = set()
        for member in list(members) + [lead]:
            if member is not None and member.id not in seen:
                seen.add(member.id)
                unique.append(member)
        self.members = unique

    def ensure_lead_is_member(self, lead=None):
        lead = lead or self.lead
        if lead is not None and lead.id not in self.member_ids:
            self.members.append(lead)

    def is_member(self, user_id: str) -> bool:
        return user_id in self.member_ids

    # Task ledger

    def task_entry(self, task_id: str):
        for entry in self.tasks:
            if entry.task_id == task_id:
                return entry
        return None

    def has_task(self, task_id: str) -> bool:
        return self.task_entry(task_id) is not None

    def add_task(self, task_id: str, assigned_by: str, status: str = "Todo"):
        entry = GroupTask(task_id=task_id, assigned_by=assigned_by, status=status, assigned_at=utcnow())
        self.tasks.append(entry)
        return entry

    def __repr__(self):
        return f"<Group(gid={self.gid}, title='{self.title}')>"


class GroupTask(Base):
    __tablename__ = "group_tasks"
    __table_args__ = (UniqueConstraint("group_id", "task_id", name="uq_group_task"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    task_id = Column(String(32), ForeignKey("tasks.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=STATUSES[0])
    assigned_by = Column(String(32), ForeignKey("users.id"), nullable=False)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    group = relationship("Group", back_populates="tasks")
    task = relationship("Task")


@event.listens_for(Session, "before_flush")
def _keep_lead_in_members(session, flush_context, instances):
    """Every group write keeps its lead inside the member set"""
    for obj in list(session.new) + list(session.dirty):
        if not isinstance(obj, Group) or obj in session.deleted:
            continue
        lead = obj.lead
        if lead is None and obj.lead_id is not None:
            from app.models.user import User
            lead = session.get(User, obj.lead_id)
        obj.ensure_lead_is_member(lead)
