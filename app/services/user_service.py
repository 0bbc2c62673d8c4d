# app/services/user_service.py
import logging
from typing import List
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User, UserTaskEntry, Task, TaskHistory, TaskComment, Group, GroupTask, Notification, group_members
from app.models.counter import assign_sequence, new_id
from app.schemas.user import UserCreate, UserUpdate
from app.utils.errors import Conflict, InvalidInput
from app.utils.roles import ROLES, normalize_role
from app.utils.security import hash_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def email_taken(self, email: str, exclude_id: str = None) -> bool:
        query = self.db.query(User).filter(User.email == email.strip().lower())
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def create_user(self, data: UserCreate) -> User:
        role = normalize_role(data.role)
        if role not in ROLES:
            raise InvalidInput(f"Invalid role: must be one of {', '.join(ROLES)}")
        if self.email_taken(data.email):
            raise Conflict("User with this email already exists")

        user = User(
            id=new_id(),
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            role=role,
            is_active=True,
        )
        assign_sequence(self.db, user)
        self.db.add(user)
        logger.info(f"Created {role} user {user.email} (uid {user.uid})")
        return user

    def update_user(self, user: User, data: UserUpdate, allow_admin_fields: bool) -> User:
        updates = data.model_dump(exclude_unset=True)
        if not allow_admin_fields:
            updates = {k: v for k, v in updates.items() if k in ("name", "email")}
        if not updates:
            raise InvalidInput("No valid fields to update")

        for field in ("name", "email", "role", "is_active"):
            if field in updates and updates[field] is None:
                raise InvalidInput(f"{field} cannot be null")

        if "email" in updates and self.email_taken(updates["email"], exclude_id=user.id):
            raise Conflict("Email already in use")
        if "role" in updates:
            role = normalize_role(updates["role"])
            if role not in ROLES:
                raise InvalidInput(f"Invalid role: must be one of {', '.join(ROLES)}")
            updates["role"] = role

        for field, value in updates.items():
            setattr(user, field, value)
        return user

    def set_password(self, user: User, password: str):
        user.hashed_password = hash_password(password)

    def references(self, user_id: str) -> List[str]:
        """Names of the records that still point at a user"""
        db = self.db
        checks = [
            ("tasks created", db.query(Task.id).filter(Task.created_by == user_id)),
            ("tasks assigned", db.query(Task.id).filter(Task.assigned_user_id == user_id)),
            ("task status records", db.query(Task.id).filter(Task.status_updated_by == user_id)),
            ("task history", db.query(TaskHistory.id).filter(TaskHistory.updated_by == user_id)),
            ("task comments", db.query(TaskComment.id).filter(TaskComment.user_id == user_id)),
            ("groups", db.query(Group.id).filter(or_(Group.lead_id == user_id, Group.created_by == user_id))),
            ("group memberships", db.query(group_members.c.group_id).filter(group_members.c.user_id == user_id)),
            ("group task entries", db.query(GroupTask.id).filter(GroupTask.assigned_by == user_id)),
            ("task ledger entries", db.query(UserTaskEntry.id).filter(
                UserTaskEntry.assigned_by == user_id, UserTaskEntry.user_id != user_id)),
        ]
        return [name for name, query in checks if query.first() is not None]

    def delete_user(self, user: User):
        referenced = self.references(user.id)
        if referenced:
            raise Conflict(f"User is still referenced by {', '.join(referenced)}")
        self.db.query(Notification).filter(Notification.user_id == user.id).delete(synchronize_session=False)
        self.db.delete(user)
        logger.info(f"Deleted user {user.email} (uid {user.uid})")

    def commit(self):
        """Commit, mapping a lost unique-email race onto Conflict"""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error on user write: {e.orig}")
            raise Conflict("User with this email already exists")
