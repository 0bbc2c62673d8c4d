# app/utils/permissions.py
"""
Role-based permission table.

Each operation maps to a rule ``(actor, target) -> bool``. Routers call
``require`` after the target has been fetched through the scoping layer, so a
rule only decides *what* an actor may do to a record it can already see.
"""

import enum
import logging

from app.utils.errors import Forbidden
from app.utils.roles import Role

logger = logging.getLogger(__name__)

ADMIN = Role.ADMIN.value
MANAGER = Role.MANAGER.value
EMPLOYEE = Role.EMPLOYEE.value


class Operation(str, enum.Enum):
    USER_CREATE = "user:create"
    USER_UPDATE = "user:update"
    USER_CHANGE_ROLE = "user:change-role"
    USER_TOGGLE_ACTIVE = "user:toggle-active"
    USER_CHANGE_PASSWORD = "user:change-password"
    USER_DELETE = "user:delete"

    TASK_CREATE = "task:create"
    TASK_ASSIGN = "task:assign"
    TASK_UNASSIGN = "task:unassign"
    TASK_UPDATE_STATUS = "task:update-status"
    TASK_EDIT = "task:edit"
    TASK_COMMENT = "task:comment"
    TASK_REOPEN = "task:reopen"
    TASK_DELETE = "task:delete"

    GROUP_CREATE = "group:create"
    GROUP_MODIFY = "group:modify"
    GROUP_ADD_TASK = "group:add-task"
    GROUP_DELETE = "group:delete"

    LEDGER_VIEW = "ledger:view"
    LEDGER_ASSIGN = "ledger:assign"
    LEDGER_UPDATE_STATUS = "ledger:update-status"
    LEDGER_REMOVE = "ledger:remove"

    DASHBOARD_VIEW = "dashboard:view"


def _admin_only(actor, target=None):
    return actor.role == ADMIN


def _admin_or_manager(actor, target=None):
    return actor.role in (ADMIN, MANAGER)


def _admin_or_self(actor, target=None):
    target_id = getattr(target, "id", target)
    return actor.role == ADMIN or actor.id == target_id


def _anyone(actor, target=None):
    return True


def _task_status_rule(actor, task):
    if actor.role in (ADMIN, MANAGER):
        return True
    return actor.id == task.created_by or task.is_user_assigned(actor.id)


def _task_edit_rule(actor, task):
    if actor.role == EMPLOYEE:
        return False
    return actor.role in (ADMIN, MANAGER) or actor.id == task.created_by


def _task_reopen_rule(actor, task):
    return actor.role == ADMIN or actor.id == task.created_by


def _group_modify_rule(actor, group):
    return actor.role == ADMIN or actor.id in (group.created_by, group.lead_id)


RULES = {
    Operation.USER_CREATE: _admin_only,
    Operation.USER_UPDATE: _admin_or_self,
    Operation.USER_CHANGE_ROLE: _admin_only,
    Operation.USER_TOGGLE_ACTIVE: _admin_only,
    Operation.USER_CHANGE_PASSWORD: _admin_or_self,
    Operation.USER_DELETE: _admin_only,

    Operation.TASK_CREATE: _admin_or_manager,
    Operation.TASK_ASSIGN: _admin_or_manager,
    Operation.TASK_UNASSIGN: _admin_or_manager,
    Operation.TASK_UPDATE_STATUS: _task_status_rule,
    Operation.TASK_EDIT: _task_edit_rule,
    Operation.TASK_COMMENT: _anyone,
    Operation.TASK_REOPEN: _task_reopen_rule,
    Operation.TASK_DELETE: _admin_only,

    Operation.GROUP_CREATE: _admin_or_manager,
    Operation.GROUP_MODIFY: _group_modify_rule,
    Operation.GROUP_ADD_TASK: _group_modify_rule,
    Operation.GROUP_DELETE: _admin_only,

    Operation.LEDGER_VIEW: _admin_or_self,
    Operation.LEDGER_ASSIGN: _admin_or_manager,
    Operation.LEDGER_UPDATE_STATUS: _admin_or_self,
    Operation.LEDGER_REMOVE: _admin_or_manager,

    Operation.DASHBOARD_VIEW: _admin_only,
}

DENIED_MESSAGES = {
    Operation.USER_CREATE: "Only admin can create users",
    Operation.USER_UPDATE: "You can only edit your own profile",
    Operation.USER_CHANGE_ROLE: "Only admin can change user roles or status",
    Operation.USER_TOGGLE_ACTIVE: "Only admin can activate or deactivate users",
    Operation.USER_CHANGE_PASSWORD: "You can only change your own password",
    Operation.USER_DELETE: "Only admin can delete users",
    Operation.TASK_CREATE: "Only admin/manager can create tasks",
    Operation.TASK_ASSIGN: "Only admin/manager can assign tasks",
    Operation.TASK_UNASSIGN: "Only admin/manager can remove task assignments",
    Operation.TASK_UPDATE_STATUS: "Not allowed to update the status of this task",
    Operation.TASK_EDIT: "Not allowed to modify this task",
    Operation.TASK_REOPEN: "Only admin or the task creator can reopen a task",
    Operation.TASK_DELETE: "Only admin can delete tasks",
    Operation.GROUP_CREATE: "Only admin/manager can create groups",
    Operation.GROUP_MODIFY: "Only admin, group creator, or group lead can modify this group",
    Operation.GROUP_ADD_TASK: "Only admin, group creator, or group lead can add tasks",
    Operation.GROUP_DELETE: "Only admin can delete groups",
    Operation.LEDGER_VIEW: "You can only view your own assigned tasks",
    Operation.LEDGER_ASSIGN: "Only admin/manager can assign tasks",
    Operation.LEDGER_UPDATE_STATUS: "You can only update your own task status",
    Operation.LEDGER_REMOVE: "Only admin/manager can remove task assignments",
    Operation.DASHBOARD_VIEW: "Only admin can view the dashboard",
}


def can(actor, operation: Operation, target=None) -> bool:
    return RULES[Operation(operation)](actor, target)


def require(actor, operation: Operation, target=None, message: str = None):
    operation = Operation(operation)
    if not can(actor, operation, target):
        logger.warning(f"Actor {actor.uid} ({actor.role}) denied {operation.value}")
        raise Forbidden(message or DENIED_MESSAGES.get(operation, "Forbidden"))
