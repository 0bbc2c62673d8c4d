# app/services/task_service.py
"""
Task lifecycle: creation, assignment, status transitions, edits, comments,
reopen and deletion.

The task's own assignment is authoritative. The per-user ledger
(UserTaskEntry) and the group ledger (GroupTask) mirror it and are written
through the same session, so one commit persists the task and its mirrors
together or not at all.
"""

import logging
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from app.models import Group, GroupTask, Task, User, UserTaskEntry, NotificationType
from app.models.counter import assign_sequence
from app.schemas.task import TaskCreate, TaskUpdate
from app.utils.errors import Forbidden, InvalidInput
from app.utils.lookup import find_by_id
from app.utils.notifications import NotificationSink
from app.utils.permissions import Operation, require
from app.utils.roles import TaskStatus, can_assign, pretty_role

logger = logging.getLogger(__name__)

# Fields that may never be cleared through an edit
REQUIRED_FIELDS = ("title", "description", "priority", "attachments")


def task_link(task: Task) -> str:
    return f"/tasks/{task.tid or task.id}"


class TaskService:
    def __init__(self, db: Session, actor, sink: Optional[NotificationSink] = None):
        self.db = db
        self.actor = actor
        self.sink = sink or NotificationSink(db, actor.id)

    # Target resolution

    def resolve_assignee(self, raw_id: str) -> User:
        user = find_by_id(self.db, User, raw_id)
        if user is None or not user.is_active:
            raise InvalidInput("Invalid assignee: user must exist and be active")
        if not can_assign(self.actor.role, user.role):
            logger.warning(f"Actor {self.actor.uid} ({self.actor.role}) cannot assign to {user.role} {user.uid}")
            raise Forbidden(f"{pretty_role(self.actor.role)} cannot assign tasks to {pretty_role(user.role)}")
        return user

    def resolve_group(self, raw_id: str) -> Group:
        group = find_by_id(self.db, Group, raw_id)
        if group is None or not group.is_active:
            raise InvalidInput("Invalid group: group must exist and be active")
        return group

    def resolve_target(self, assignee_id: Optional[str], group_id: Optional[str]) -> Tuple[Optional[User], Optional[Group]]:
        if assignee_id and group_id:
            raise InvalidInput("A task can be assigned to a user or a group, not both")
        if assignee_id:
            return self.resolve_assignee(assignee_id), None
        if group_id:
            return None, self.resolve_group(group_id)
        return None, None

    # Mirror maintenance

    def _link_user(self, task: Task, user: User):
        task.assign_user(user.id)
        user.add_ledger_task(task.id, self.actor.id, task.status)
        self.sink.notify(
            user.id,
            NotificationType.TASK_ASSIGNED,
            f"You have been assigned task '{task.title}' by {self.actor.name}",
            task_link(task),
        )

    def _link_group(self, task: Task, group: Group):
        task.assign_group(group.id)
        if not group.has_task(task.id):
            group.add_task(task.id, self.actor.id, task.status)
        self.sink.notify_many(
            group.member_ids,
            NotificationType.TASK_ASSIGNED,
            f"Task '{task.title}' was assigned to your group '{group.title}'",
            task_link(task),
        )

    def _drop_user_mirror(self, task: Task):
        if task.assigned_user_id is None:
            return
        previous = self.db.get(User, task.assigned_user_id)
        if previous is not None:
            previous.remove_ledger_task(task.id)
            self.sink.notify(
                previous.id,
                NotificationType.TASK_UNASSIGNED,
                f"You are no longer assigned to task '{task.title}'",
                task_link(task),
            )

    def _sync_status_mirrors(self, task: Task):
        # Entries staged earlier in this request must be visible to the queries below
        self.db.flush()
        entries = self.db.query(UserTaskEntry).filter(UserTaskEntry.task_id == task.id).all()
        for entry in entries:
            entry.status = task.status
        group_entries = self.db.query(GroupTask).filter(GroupTask.task_id == task.id).all()
        for entry in group_entries:
            entry.status = task.status

    def _watchers(self, task: Task):
        """Users interested in changes to a task: its creator and its assignees"""
        user_ids = [task.created_by]
        if task.assigned_user_id:
            user_ids.append(task.assigned_user_id)
        elif task.assigned_group_id:
            group = self.db.get(Group, task.assigned_group_id)
            if group is not None:
                user_ids.extend(group.member_ids)
        return user_ids

    # Operations

    def create_task(self, data: TaskCreate) -> Task:
        require(self.actor, Operation.TASK_CREATE)

        # Validate the target before anything is written
        assignee, group = self.resolve_target(data.assignee_id, data.group_id)

        task = Task(
            title=data.title,
            description=data.description,
            priority=data.priority.value,
            due=data.due,
            attachments=[attachment.model_dump() for attachment in data.attachments],
            created_by=self.actor.id,
        )
        assign_sequence(self.db, task)
        self.db.add(task)

        if assignee is not None:
            self._link_user(task, assignee)
        elif group is not None:
            self._link_group(task, group)

        logger.info(f"Task {task.tid} created by {self.actor.uid}")
        return task

    def assign(self, task: Task, assignee_id: Optional[str] = None, group_id: Optional[str] = None,
               comment: Optional[str] = None) -> Task:
        require(self.actor, Operation.TASK_ASSIGN)
        if not assignee_id and not group_id:
            raise InvalidInput("assignee_id or group_id is required")

        assignee, group = self.resolve_target(assignee_id, group_id)
        if assignee is not None and task.assigned_user_id == assignee.id:
            return task
        if group is not None and task.assigned_group_id == group.id:
            return task

        if task.is_assigned():
            target = f"user {assignee.email}" if assignee is not None else f"group {group.title}"
            task.record_reassignment(self.actor.id, comment or f"Reassigned to {target}")

        self._drop_user_mirror(task)
        if assignee is not None:
            self._link_user(task, assignee)
        else:
            self._link_group(task, group)

        logger.info(f"Task {task.tid} assigned to {task.assigned_to} by {self.actor.uid}")
        return task

    def unassign(self, task: Task) -> Task:
        require(self.actor, Operation.TASK_UNASSIGN)
        if not task.is_assigned():
            return task

        self._drop_user_mirror(task)
        task.remove_assignment()
        logger.info(f"Task {task.tid} unassigned by {self.actor.uid}")
        return task

    def update_status(self, task: Task, new_status, comment: Optional[str] = None) -> bool:
        require(self.actor, Operation.TASK_UPDATE_STATUS, task)

        previous = task.status
        changed = task.update_status(new_status, self.actor.id, comment)
        if not changed:
            return False

        self._sync_status_mirrors(task)

        if task.status == TaskStatus.COMPLETED.value:
            notification_type = NotificationType.TASK_COMPLETED
        else:
            notification_type = NotificationType.TASK_STATUS_CHANGED
        self.sink.notify_many(
            self._watchers(task),
            notification_type,
            f"Task '{task.title}' moved from {previous} to {task.status} by {self.actor.name}",
            task_link(task),
        )
        logger.info(f"Task {task.tid} status {previous} -> {task.status} by {self.actor.uid}")
        return True

    def edit(self, task: Task, data: TaskUpdate) -> Task:
        require(self.actor, Operation.TASK_EDIT, task)

        updates = data.model_dump(exclude_unset=True)
        if not updates:
            raise InvalidInput("No valid fields to update")

        for field, value in updates.items():
            if value is None and field in REQUIRED_FIELDS:
                raise InvalidInput(f"{field} cannot be null")

        if "title" in updates:
            updates["title"] = updates["title"].strip()
        if "description" in updates:
            updates["description"] = updates["description"].strip()
        if "priority" in updates:
            updates["priority"] = data.priority.value

        for field, value in updates.items():
            if not value and field in ("title", "description"):
                raise InvalidInput(f"{field} must not be blank")
            setattr(task, field, value)

        logger.info(f"Task {task.tid} fields {sorted(updates)} edited by {self.actor.uid}")
        return task

    def add_comment(self, task: Task, text: str):
        require(self.actor, Operation.TASK_COMMENT, task)
        comment = task.add_comment(self.actor.id, text)
        self.sink.notify_many(
            self._watchers(task),
            NotificationType.TASK_COMMENTED,
            f"{self.actor.name} commented on task '{task.title}'",
            task_link(task),
        )
        return comment

    def reopen(self, task: Task, comment: Optional[str] = None) -> Task:
        require(self.actor, Operation.TASK_REOPEN, task)
        try:
            task.reopen(self.actor.id, comment)
        except ValueError as e:
            raise InvalidInput(str(e))

        self._sync_status_mirrors(task)
        self.sink.notify_many(
            self._watchers(task),
            NotificationType.TASK_REOPENED,
            f"Task '{task.title}' was reopened by {self.actor.name}",
            task_link(task),
        )
        logger.info(f"Task {task.tid} reopened by {self.actor.uid}")
        return task

    def delete(self, task: Task):
        require(self.actor, Operation.TASK_DELETE)
        self.db.query(UserTaskEntry).filter(UserTaskEntry.task_id == task.id).delete(synchronize_session=False)
        self.db.query(GroupTask).filter(GroupTask.task_id == task.id).delete(synchronize_session=False)
        self.db.delete(task)
        logger.info(f"Task {task.tid} deleted by {self.actor.uid}")
