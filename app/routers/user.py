# app/routers/user.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.models.user import User
from app.schemas.common import Message, Page
from app.schemas.user import UserCreate, UserOut, UserUpdate, PasswordChange, UserActiveState
from app.services.user_service import UserService
from app.utils.auth import Actor, get_current_actor
from app.utils.errors import Forbidden, InvalidInput
from app.utils.pagination import PageParams, paginate
from app.utils.permissions import Operation, require
from app.utils.roles import normalize_role
from app.utils.scoping import ScopeManager

router = APIRouter()


@router.get("", response_model=Page[UserOut])
def list_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    params: PageParams = Depends(),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Users visible to the caller: admins see everyone, managers see employees, employees see themselves"""
    predicate = ScopeManager(db).user_scope(actor, role)
    query = db.query(User).filter(predicate)
    return paginate(query, params, order_by=User.uid)


@router.get("/me", response_model=UserOut)
def get_me(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return db.get(User, actor.id)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    return ScopeManager(db).get_user(actor, user_id)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    require(actor, Operation.USER_CREATE)
    service = UserService(db)
    db_user = service.create_user(user)
    service.commit()
    db.refresh(db_user)
    return db_user


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Admins may change any field; everyone else only their own name and email"""
    db_user = ScopeManager(db).get_user(actor, user_id)
    require(actor, Operation.USER_UPDATE, db_user)

    if not actor.is_admin and (user_update.role is not None or user_update.is_active is not None):
        require(actor, Operation.USER_CHANGE_ROLE)
    if db_user.id == actor.id:
        if user_update.is_active is False:
            raise InvalidInput("You cannot deactivate your own account")
        if user_update.role is not None and normalize_role(user_update.role) != db_user.role:
            raise InvalidInput("You cannot change your own role")

    service = UserService(db)
    service.update_user(db_user, user_update, allow_admin_fields=actor.is_admin)
    service.commit()
    db.refresh(db_user)
    return db_user


@router.patch("/{user_id}/toggle", response_model=UserActiveState)
def toggle_user(user_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    require(actor, Operation.USER_TOGGLE_ACTIVE)
    db_user = ScopeManager(db).get_user(actor, user_id)
    if db_user.id == actor.id:
        raise InvalidInput("You cannot deactivate your own account")

    db_user.is_active = not db_user.is_active
    db.commit()
    db.refresh(db_user)
    return db_user


@router.patch("/{user_id}/password", response_model=Message)
def change_password(
    user_id: str,
    payload: PasswordChange,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    db_user = ScopeManager(db).get_user(actor, user_id)
    require(actor, Operation.USER_CHANGE_PASSWORD, db_user)

    UserService(db).set_password(db_user, payload.password)
    db.commit()
    return {"message": "Password updated successfully"}


@router.delete("/{user_id}", response_model=Message)
def delete_user(user_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    require(actor, Operation.USER_DELETE)
    db_user = ScopeManager(db).get_user(actor, user_id)

    # Prevent users from deleting themselves
    if db_user.id == actor.id:
        raise Forbidden("You cannot delete your own account")

    UserService(db).delete_user(db_user)
    db.commit()
    return {"message": "User deleted successfully"}
