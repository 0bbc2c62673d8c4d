# app/routers/user_tasks.py
"""
Per-user task ledger. Assigning through the ledger assigns the task itself,
so the ledger never disagrees with a task's own assignment.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.models import Task, User
from app.schemas.common import Message
from app.schemas.user_task import LedgerOut, LedgerAssign, LedgerStatusUpdate
from app.services.task_service import TaskService
from app.utils.auth import Actor, get_current_actor
from app.utils.errors import NotFound
from app.utils.lookup import find_by_id
from app.utils.permissions import Operation, require
from app.utils.roles import TaskStatus
from app.utils.scoping import ScopeManager

router = APIRouter(prefix="/user-tasks", tags=["User Tasks"])


def _is_self(actor: Actor, raw_id: str) -> bool:
    raw_id = str(raw_id).strip()
    return raw_id == actor.id or (actor.uid is not None and raw_id == str(actor.uid))


def _get_user(db: Session, raw_id: str) -> User:
    user = find_by_id(db, User, raw_id)
    if user is None:
        raise NotFound("User not found")
    return user


def _ledger(user: User, status: Optional[TaskStatus] = None) -> dict:
    entries = user.ledger_tasks_by_status(status.value) if status else list(user.task_ledger)
    return {"user_id": user.id, "assigned_tasks": entries, "total": len(entries)}


@router.get("/{user_id}", response_model=LedgerOut)
def get_user_tasks(
    user_id: str,
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """A user's assigned tasks; visible to that user and to admins"""
    require(actor, Operation.LEDGER_VIEW, actor.id if _is_self(actor, user_id) else None)
    return _ledger(_get_user(db, user_id), task_status)


@router.post("/{user_id}/tasks", response_model=LedgerOut, status_code=status.HTTP_201_CREATED)
def assign_task_to_user(
    user_id: str,
    payload: LedgerAssign,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    require(actor, Operation.LEDGER_ASSIGN)
    task = ScopeManager(db).get_task(actor, payload.task_id)

    service = TaskService(db, actor)
    user = service.resolve_assignee(user_id)
    service.assign(task, assignee_id=user.id)
    service.update_status(task, payload.status, comment=f"Assigned to user {user.uid}")

    db.commit()
    service.sink.dispatch(background_tasks)
    db.refresh(user)
    return _ledger(user)


@router.patch("/{user_id}/tasks/{task_id}", response_model=LedgerOut)
def update_user_task_status(
    user_id: str,
    task_id: str,
    payload: LedgerStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    require(actor, Operation.LEDGER_UPDATE_STATUS, actor.id if _is_self(actor, user_id) else None)
    user = _get_user(db, user_id)
    task = find_by_id(db, Task, task_id)
    if task is None or user.ledger_entry(task.id) is None:
        raise NotFound("Task not found in user's assigned tasks")

    service = TaskService(db, actor)
    service.update_status(task, payload.status, comment=f"Updated by user {actor.uid}")

    db.commit()
    service.sink.dispatch(background_tasks)
    db.refresh(user)
    return _ledger(user)


@router.delete("/{user_id}/tasks/{task_id}", response_model=Message)
def remove_user_task(
    user_id: str,
    task_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    require(actor, Operation.LEDGER_REMOVE)
    user = _get_user(db, user_id)
    task = find_by_id(db, Task, task_id)
    if task is None or user.ledger_entry(task.id) is None:
        raise NotFound("Task not found in user's assigned tasks")

    service = TaskService(db, actor)
    if task.assigned_user_id == user.id:
        service.unassign(task)
    else:
        user.remove_ledger_task(task.id)

    db.commit()
    service.sink.dispatch(background_tasks)
    return {"message": "Task removed from user"}
