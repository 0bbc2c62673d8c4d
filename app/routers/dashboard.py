# app/routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import func, desc
from datetime import timedelta

from app.database import get_db
from app.models import User, Task, TaskHistory, Group, HistoryKind
from app.utils.auth import require_roles
from app.utils.dates import utcnow
from app.utils.roles import Role, TaskStatus, STATUSES, PRIORITIES

# Every report is admin only
router = APIRouter(
    prefix="/admin/dashboard",
    tags=["Admin Dashboard"],
    dependencies=[Depends(require_roles(Role.ADMIN))],
)

COMPLETED = TaskStatus.COMPLETED.value


@router.get("/summary")
def get_summary(db: Session = Depends(get_db)):
    return {
        "total_users": db.query(User).count(),
        "total_tasks": db.query(Task).count(),
        "completed_tasks": db.query(Task).filter(Task.status == COMPLETED).count(),
        "active_groups": db.query(Group).filter(Group.is_active == True).count(),
    }


@router.get("/tasks-by-status")
def get_tasks_by_status(db: Session = Depends(get_db)):
    counts = {status: 0 for status in STATUSES}
    rows = db.query(Task.status, func.count(Task.id)).group_by(Task.status).all()
    for status, count in rows:
        counts[status] = count
    return counts


@router.get("/tasks-by-priority")
def get_tasks_by_priority(db: Session = Depends(get_db)):
    counts = {priority: 0 for priority in PRIORITIES}
    rows = db.query(Task.priority, func.count(Task.id)).group_by(Task.priority).all()
    for priority, count in rows:
        counts[priority] = count
    return counts


@router.get("/tasks-over-time")
def get_tasks_over_time(
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Tasks created per day over the last ``days`` days"""
    since = utcnow() - timedelta(days=days)
    day = func.date(Task.created_at)
    rows = (
        db.query(day.label("day"), func.count(Task.id))
        .filter(Task.created_at >= since)
        .group_by(day)
        .order_by(day)
        .all()
    )
    return [{"date": str(created_on), "count": count} for created_on, count in rows]


@router.get("/user-performance")
def get_user_performance(db: Session = Depends(get_db)):
    completed = func.count(Task.id).label("completed_tasks")
    rows = (
        db.query(User.id, User.uid, User.name, completed)
        .join(Task, Task.assigned_user_id == User.id)
        .filter(Task.status == COMPLETED)
        .group_by(User.id, User.uid, User.name)
        .order_by(desc(completed))
        .all()
    )
    return [
        {"user_id": user_id, "uid": uid, "user_name": name, "completed_tasks": count}
        for user_id, uid, name, count in rows
    ]


@router.get("/group-performance")
def get_group_performance(db: Session = Depends(get_db)):
    completed = func.count(Task.id).label("completed_tasks")
    rows = (
        db.query(Group.id, Group.gid, Group.title, completed)
        .join(Task, Task.assigned_group_id == Group.id)
        .filter(Task.status == COMPLETED)
        .group_by(Group.id, Group.gid, Group.title)
        .order_by(desc(completed))
        .all()
    )
    return [
        {"group_id": group_id, "gid": gid, "group_name": title, "completed_tasks": count}
        for group_id, gid, title, count in rows
    ]


@router.get("/reassignments")
def get_reassignments(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """How often tasks change hands, with the most reassigned tasks first"""
    reassignments = func.count(TaskHistory.id).label("reassignments")
    rows = (
        db.query(Task.id, Task.tid, Task.title, reassignments)
        .join(TaskHistory, TaskHistory.task_id == Task.id)
        .filter(TaskHistory.kind == HistoryKind.REASSIGNMENT)
        .group_by(Task.id, Task.tid, Task.title)
        .order_by(desc(reassignments))
        .limit(limit)
        .all()
    )
    total = db.query(TaskHistory).filter(TaskHistory.kind == HistoryKind.REASSIGNMENT).count()
    return {
        "total": total,
        "tasks": [
            {"task_id": task_id, "tid": tid, "title": title, "reassignments": count}
            for task_id, tid, title, count in rows
        ],
    }
