# app/utils/scoping.py
from typing import List, Optional
from sqlalchemy import and_, or_, select, true
from sqlalchemy.orm import Session

from app.models.group import Group, group_members
from app.models.task import Task
from app.models.user import User
from app.utils.errors import Forbidden, InvalidFilter, NotFound
from app.utils.lookup import find_by_id
from app.utils.roles import Role, ROLES, normalize_role


class ScopeManager:
    """Builds the query predicates that restrict what an actor may see.

    Records outside an actor's scope are reported as missing, never as
    forbidden, so callers cannot probe for the existence of other records.
    """

    def __init__(self, db: Session):
        self.db = db

    def group_ids_for(self, actor) -> List[str]:
        """Ids of the groups the actor leads or belongs to"""
        member_of = self.db.execute(
            select(group_members.c.group_id).where(group_members.c.user_id == actor.id)
        ).scalars().all()
        group_ids = set(member_of)

        if actor.role == Role.MANAGER.value:
            leading = self.db.execute(
                select(Group.id).where(Group.lead_id == actor.id)
            ).scalars().all()
            group_ids.update(leading)

        return sorted(group_ids)

    # Users

    def validate_role_filter(self, actor, role_filter: Optional[str]) -> Optional[str]:
        if role_filter is None or str(role_filter).strip() == "":
            return None

        role = normalize_role(role_filter)
        if role not in ROLES:
            raise InvalidFilter("Invalid role filter")
        if actor.role == Role.MANAGER.value and role != Role.EMPLOYEE.value:
            raise Forbidden("Managers can only view employees")
        return role

    def user_scope(self, actor, role_filter: Optional[str] = None):
        role = self.validate_role_filter(actor, role_filter)

        if actor.role == Role.ADMIN.value:
            predicate = true()
        elif actor.role == Role.MANAGER.value:
            predicate = User.role == Role.EMPLOYEE.value
        else:
            predicate = User.id == actor.id

        if role is not None:
            predicate = and_(predicate, User.role == role)
        return predicate

    # Tasks

    def task_scope(self, actor):
        if actor.role == Role.ADMIN.value:
            return true()

        # Group membership has to be resolved before the task filter can be built
        group_ids = self.group_ids_for(actor)

        clauses = [Task.assigned_user_id == actor.id]
        if group_ids:
            clauses.append(Task.assigned_group_id.in_(group_ids))
        if actor.role == Role.MANAGER.value:
            clauses.append(Task.created_by == actor.id)
        return or_(*clauses)

    # Groups

    def group_scope(self, actor):
        if actor.role == Role.ADMIN.value:
            return true()

        is_member = Group.members.any(User.id == actor.id)
        if actor.role == Role.MANAGER.value:
            return or_(Group.created_by == actor.id, Group.lead_id == actor.id, is_member)
        return is_member

    # Scoped lookups

    def get_user(self, actor, raw_id: str) -> User:
        user = find_by_id(self.db, User, raw_id, scope=self.user_scope(actor))
        if user is None and actor.role != Role.ADMIN.value:
            # Everyone can always see themselves
            user = find_by_id(self.db, User, raw_id, scope=User.id == actor.id)
        if user is None:
            raise NotFound("User not found")
        return user

    def get_task(self, actor, raw_id: str) -> Task:
        task = find_by_id(self.db, Task, raw_id, scope=self.task_scope(actor))
        if task is None:
            raise NotFound("Task not found")
        return task

    def get_group(self, actor, raw_id: str) -> Group:
        group = find_by_id(self.db, Group, raw_id, scope=self.group_scope(actor))
        if group is None:
            raise NotFound("Group not found")
        return group
