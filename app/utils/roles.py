# app/utils/roles.py
import enum
from typing import Optional


class Role(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class TaskStatus(str, enum.Enum):
    TODO = "Todo"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CLOSED = "Closed"


class TaskPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


ROLES = [r.value for r in Role]
STATUSES = [s.value for s in TaskStatus]
PRIORITIES = [p.value for p in TaskPriority]

TERMINAL_STATUSES = {TaskStatus.COMPLETED.value, TaskStatus.CLOSED.value}

# Higher number = more privilege
ROLE_RANK = {
    Role.ADMIN.value: 3,
    Role.MANAGER.value: 2,
    Role.EMPLOYEE.value: 1,
}

ASSIGN_PERMISSIONS = {
    Role.ADMIN.value: [Role.MANAGER.value, Role.EMPLOYEE.value],
    Role.MANAGER.value: [Role.EMPLOYEE.value],
    Role.EMPLOYEE.value: [],
}

# Roles allowed to lead / belong to a group
GROUP_LEAD_ROLES = [Role.MANAGER.value]
GROUP_MEMBER_ROLES = [Role.MANAGER.value, Role.EMPLOYEE.value]


def normalize_role(role) -> str:
    """Trim and lowercase a role; always compare normalized values"""
    if isinstance(role, Role):
        return role.value
    return str(role or "").strip().lower()


def is_valid_role(role) -> bool:
    return normalize_role(role) in ROLES


def parse_role(role) -> Optional[Role]:
    normalized = normalize_role(role)
    if normalized not in ROLES:
        return None
    return Role(normalized)


def can_assign(actor_role, assignee_role) -> bool:
    return normalize_role(assignee_role) in ASSIGN_PERMISSIONS.get(normalize_role(actor_role), [])


def outranks(role, other) -> bool:
    return ROLE_RANK.get(normalize_role(role), 0) > ROLE_RANK.get(normalize_role(other), 0)


def pretty_role(role) -> str:
    normalized = normalize_role(role)
    return normalized[:1].upper() + normalized[1:]
