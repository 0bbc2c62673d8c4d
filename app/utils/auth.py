# app/utils/auth.py
import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.utils.errors import Unauthorized, Forbidden
from app.utils.roles import Role, normalize_role, pretty_role
from app.utils.security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Actor:
    """The authenticated identity performing a request, with a normalized role"""

    def __init__(self, id: str, uid: Optional[int], role: str, name: str = "", email: str = ""):
        self.id = id
        self.uid = uid
        self.role = normalize_role(role)
        self.name = name
        self.email = email

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, uid=user.uid, role=user.role, name=user.name, email=user.email)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def has_role(self, *roles) -> bool:
        return self.role in {normalize_role(r) for r in roles}

    def __repr__(self):
        return f"<Actor(uid={self.uid}, role='{self.role}')>"


def resolve_actor(token: Optional[str], db: Session) -> Actor:
    """Verify a bearer token and resolve it to an active user"""
    if not token:
        raise Unauthorized("No token provided")

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise Unauthorized("Could not validate credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthorized("Could not validate credentials")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Invalid token")

    # Check if user is active
    if not user.is_active:
        raise Unauthorized("Account has been deactivated. Please contact administrator.")

    return Actor.from_user(user)


def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Actor:
    token = credentials.credentials if credentials and credentials.scheme.lower() == "bearer" else None
    actor = resolve_actor(token, db)
    request.state.actor = actor
    return actor


def ensure_role(actor: Actor, allowed, message: Optional[str] = None):
    if not actor.has_role(*allowed):
        logger.warning(f"Actor {actor.uid} ({actor.role}) denied; requires one of {list(allowed)}")
        names = "/".join(pretty_role(r) for r in allowed)
        raise Forbidden(message or f"Only {names} can perform this action")


def require_roles(*roles: Role):
    """Dependency factory rejecting actors whose role is not in ``roles``"""
    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        ensure_role(actor, roles)
        return actor
    return dependency
