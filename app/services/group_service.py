# app/services/group_service.py
import logging
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from app.models import Group, Task, User, NotificationType
from app.models.counter import assign_sequence, new_id
from app.schemas.group import GroupCreate, GroupUpdate
from app.utils.errors import Conflict, InvalidInput
from app.utils.lookup import find_by_id
from app.utils.notifications import NotificationSink
from app.utils.permissions import Operation, require
from app.utils.roles import GROUP_LEAD_ROLES, GROUP_MEMBER_ROLES, STATUSES, TaskStatus, normalize_role
from app.utils.scoping import ScopeManager

logger = logging.getLogger(__name__)


def member_analytics(member, tasks: Iterable[Task]) -> dict:
    """Completion figures for the tasks directly assigned to one member.

    A task counts as completed once it has a completion time. Only completed
    tasks that also carry a due date are classified as on time or delayed.
    """
    assigned = [task for task in tasks if task.assigned_user_id == member.id]
    completed = [task for task in assigned if task.completed_at is not None]
    dated = [task for task in completed if task.due is not None]
    on_time = [task for task in dated if task.completed_at <= task.due]
    return {
        "user": member,
        "assigned": len(assigned),
        "completed": len(completed),
        "completed_on_time": len(on_time),
        "delayed": len(dated) - len(on_time),
    }


def group_analytics(group: Group, tasks: List[Task]) -> dict:
    status_counts = {status: 0 for status in STATUSES}
    for task in tasks:
        status_counts[task.status] = status_counts.get(task.status, 0) + 1

    return {
        "group_id": group.id,
        "gid": group.gid,
        "title": group.title,
        "total_tasks": len(tasks),
        "completed_tasks": status_counts[TaskStatus.COMPLETED.value],
        "status_counts": status_counts,
        "members": [member_analytics(member, tasks) for member in group.members],
    }


class GroupService:
    def __init__(self, db: Session, actor, sink: Optional[NotificationSink] = None):
        self.db = db
        self.actor = actor
        self.scope = ScopeManager(db)
        self.sink = sink or NotificationSink(db, actor.id)

    def resolve_lead(self, raw_id: str) -> User:
        lead = find_by_id(self.db, User, raw_id)
        if lead is None or not lead.is_active or normalize_role(lead.role) not in GROUP_LEAD_ROLES:
            raise InvalidInput("Invalid lead: must be an active manager")
        return lead

    def resolve_members(self, raw_ids: Iterable[str]) -> List[User]:
        members = []
        seen = set()
        for raw_id in raw_ids:
            user = find_by_id(self.db, User, raw_id)
            if user is None or not user.is_active:
                raise InvalidInput(f"Invalid member {raw_id}: user must exist and be active")
            if normalize_role(user.role) not in GROUP_MEMBER_ROLES:
                raise InvalidInput(f"Invalid member {user.email}: only managers and employees can join groups")
            if user.id not in seen:
                seen.add(user.id)
                members.append(user)
        return members

    def _announce_new_members(self, group: Group, before: Iterable[str]):
        added = [user_id for user_id in group.member_ids if user_id not in set(before)]
        self.sink.notify_many(
            added,
            NotificationType.GROUP_MEMBER_ADDED,
            f"You have been added to group '{group.title}'",
            f"/groups/{group.gid or group.id}",
        )

    def create(self, data: GroupCreate) -> Group:
        require(self.actor, Operation.GROUP_CREATE)

        lead = self.resolve_lead(data.lead_id)
        members = self.resolve_members(data.member_ids)

        group = Group(
            id=new_id(),
            title=data.title.strip(),
            description=data.description.strip(),
            lead=lead,
            created_by=self.actor.id,
            is_active=True,
        )
        group.set_members(members, lead)
        assign_sequence(self.db, group)
        self.db.add(group)

        self._announce_new_members(group, before=[])
        logger.info(f"Group {group.gid} '{group.title}' created by {self.actor.uid}")
        return group

    def update(self, group: Group, data: GroupUpdate) -> Group:
        require(self.actor, Operation.GROUP_MODIFY, group)

        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise InvalidInput("No valid fields to update")
        for field, value in updates.items():
            if value is None:
                raise InvalidInput(f"{field} cannot be null")

        before = group.member_ids

        if "title" in updates:
            group.title = updates["title"].strip()
        if "description" in updates:
            group.description = updates["description"].strip()
        if "is_active" in updates:
            group.is_active = updates["is_active"]

        if "lead_id" in updates:
            group.lead = self.resolve_lead(updates["lead_id"])
        if "member_ids" in updates:
            group.set_members(self.resolve_members(updates["member_ids"]), group.lead)
        else:
            group.ensure_lead_is_member(group.lead)

        self._announce_new_members(group, before)
        logger.info(f"Group {group.gid} fields {sorted(updates)} updated by {self.actor.uid}")
        return group

    def add_task(self, group: Group, raw_task_id: str):
        require(self.actor, Operation.GROUP_ADD_TASK, group)
        if not group.is_active:
            raise InvalidInput("Cannot add tasks to an inactive group")

        task = self.scope.get_task(self.actor, raw_task_id)
        if group.has_task(task.id):
            raise Conflict("Task is already in this group")

        entry = group.add_task(task.id, self.actor.id, task.status)
        self.sink.notify_many(
            group.member_ids,
            NotificationType.GROUP_TASK_ADDED,
            f"Task '{task.title}' was added to group '{group.title}'",
            f"/tasks/{task.tid or task.id}",
        )
        logger.info(f"Task {task.tid} added to group {group.gid} by {self.actor.uid}")
        return entry

    def delete(self, group: Group):
        require(self.actor, Operation.GROUP_DELETE)
        # Tasks assigned to the group lose their assignment
        assigned = self.db.query(Task).filter(Task.assigned_group_id == group.id).all()
        for task in assigned:
            task.remove_assignment()
        self.db.delete(group)
        logger.info(f"Group {group.gid} deleted by {self.actor.uid}, {len(assigned)} tasks unassigned")

    def analytics(self, group: Group) -> dict:
        task_ids = [entry.task_id for entry in group.tasks]
        tasks = self.db.query(Task).filter(Task.id.in_(task_ids)).all() if task_ids else []
        return group_analytics(group, tasks)

    def my_groups_query(self):
        return self.db.query(Group).filter(Group.members.any(User.id == self.actor.id))
