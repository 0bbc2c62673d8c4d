# app/routers/group.py
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.models.group import Group
from app.schemas.common import Message, Page
from app.schemas.group import GroupCreate, GroupUpdate, GroupTaskAdd, GroupOut, GroupAnalytics
from app.services.group_service import GroupService
from app.utils.auth import Actor, get_current_actor
from app.utils.pagination import PageParams, paginate
from app.utils.permissions import Operation, require
from app.utils.scoping import ScopeManager

router = APIRouter()


@router.post("", response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(
    group: GroupCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Create a group; the lead is always added to the members"""
    service = GroupService(db, actor)
    db_group = service.create(group)
    db.commit()
    service.sink.dispatch(background_tasks)
    db.refresh(db_group)
    return db_group


@router.get("", response_model=Page[GroupOut])
def list_groups(
    is_active: Optional[bool] = Query(None),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    query = db.query(Group).filter(ScopeManager(db).group_scope(actor))
    if is_active is not None:
        query = query.filter(Group.is_active == is_active)
    return paginate(query, params, order_by=Group.gid)


@router.get("/my", response_model=Page[GroupOut])
def my_groups(
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Groups the caller is a member of"""
    query = GroupService(db, actor).my_groups_query()
    return paginate(query, params, order_by=Group.gid)


@router.get("/{group_id}", response_model=GroupOut)
def get_group(group_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return ScopeManager(db).get_group(actor, group_id)


@router.patch("/{group_id}", response_model=GroupOut)
def update_group(
    group_id: str,
    group_update: GroupUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    db_group = ScopeManager(db).get_group(actor, group_id)
    service = GroupService(db, actor)
    service.update(db_group, group_update)
    db.commit()
    service.sink.dispatch(background_tasks)
    db.refresh(db_group)
    return db_group


@router.patch("/{group_id}/tasks", response_model=GroupOut)
def add_task_to_group(
    group_id: str,
    payload: GroupTaskAdd,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Link a visible task to the group's task ledger"""
    db_group = ScopeManager(db).get_group(actor, group_id)
    service = GroupService(db, actor)
    service.add_task(db_group, payload.task_id)
    db.commit()
    service.sink.dispatch(background_tasks)
    db.refresh(db_group)
    return db_group


@router.get("/{group_id}/analytics", response_model=GroupAnalytics)
def group_analytics(group_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    db_group = ScopeManager(db).get_group(actor, group_id)
    return GroupService(db, actor).analytics(db_group)


@router.delete("/{group_id}", response_model=Message)
def delete_group(group_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    require(actor, Operation.GROUP_DELETE)
    db_group = ScopeManager(db).get_group(actor, group_id)
    GroupService(db, actor).delete(db_group)
    db.commit()
    return {"message": "Group deleted successfully"}
