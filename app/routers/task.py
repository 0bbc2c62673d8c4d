# app/routers/task.py
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models import Task, User
from app.schemas.common import Message, Page
from app.schemas.task import (
    TaskCreate, TaskUpdate, TaskStatusUpdate, TaskAssign, TaskReopen, CommentCreate, CommentOut, TaskOut,
)
from app.services.task_service import TaskService
from app.utils.auth import Actor, get_current_actor
from app.utils.lookup import find_by_id
from app.utils.pagination import PageParams, paginate
from app.utils.permissions import Operation, require
from app.utils.roles import TaskPriority, TaskStatus
from app.utils.scoping import ScopeManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _commit(db: Session, service: TaskService, background_tasks: BackgroundTasks, task: Task = None):
    db.commit()
    service.sink.dispatch(background_tasks)
    if task is not None:
        db.refresh(task)
    return task


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Create a task, optionally assigned to one user or one group"""
    service = TaskService(db, actor)
    new_task = service.create_task(task)
    return _commit(db, service, background_tasks, new_task)


@router.get("", response_model=Page[TaskOut])
def list_tasks(
    task_status: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[TaskPriority] = None,
    created_by: Optional[str] = Query(None, description="Creator id, sequential or opaque"),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    query = db.query(Task).filter(ScopeManager(db).task_scope(actor))

    if task_status is not None:
        query = query.filter(Task.status == task_status.value)
    if priority is not None:
        query = query.filter(Task.priority == priority.value)
    if created_by:
        creator = find_by_id(db, User, created_by)
        if creator is None:
            return {"data": [], "page": params.page, "limit": params.limit, "total": 0}
        query = query.filter(Task.created_by == creator.id)

    return paginate(query, params, order_by=Task.created_at.desc())


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return ScopeManager(db).get_task(actor, task_id)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Edit title, description, priority, due date or attachments"""
    task = ScopeManager(db).get_task(actor, task_id)
    service = TaskService(db, actor)
    service.edit(task, task_update)
    return _commit(db, service, background_tasks, task)


@router.patch("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: str,
    payload: TaskStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    task = ScopeManager(db).get_task(actor, task_id)
    service = TaskService(db, actor)
    service.update_status(task, payload.status, payload.comment)
    return _commit(db, service, background_tasks, task)


@router.patch("/{task_id}/assign", response_model=TaskOut)
def assign_task(
    task_id: str,
    payload: TaskAssign,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    require(actor, Operation.TASK_ASSIGN)
    task = ScopeManager(db).get_task(actor, task_id)
    service = TaskService(db, actor)
    service.assign(task, payload.assignee_id, payload.group_id)
    return _commit(db, service, background_tasks, task)


@router.delete("/{task_id}/assign", response_model=TaskOut)
def unassign_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    require(actor, Operation.TASK_UNASSIGN)
    task = ScopeManager(db).get_task(actor, task_id)
    service = TaskService(db, actor)
    service.unassign(task)
    return _commit(db, service, background_tasks, task)


@router.post("/{task_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(
    task_id: str,
    payload: CommentCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    task = ScopeManager(db).get_task(actor, task_id)
    service = TaskService(db, actor)
    comment = service.add_comment(task, payload.comment)
    _commit(db, service, background_tasks)
    db.refresh(comment)
    return comment


@router.get("/{task_id}/comments", response_model=List[CommentOut])
def get_comments(
    task_id: str,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Most recent comments first"""
    task = ScopeManager(db).get_task(actor, task_id)
    return task.recent_comments(limit)


@router.patch("/{task_id}/reopen", response_model=TaskOut)
def reopen_task(
    task_id: str,
    background_tasks: BackgroundTasks,
    payload: Optional[TaskReopen] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    task = ScopeManager(db).get_task(actor, task_id)
    service = TaskService(db, actor)
    service.reopen(task, payload.comment if payload else None)
    return _commit(db, service, background_tasks, task)


@router.delete("/{task_id}", response_model=Message)
def delete_task(task_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    require(actor, Operation.TASK_DELETE)
    task = ScopeManager(db).get_task(actor, task_id)
    TaskService(db, actor).delete(task)
    db.commit()
    return {"message": "Task deleted successfully"}
