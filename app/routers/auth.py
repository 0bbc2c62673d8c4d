import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.database import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin, UserOut
from app.schemas.tokens import Token, SeedAdminOut
from app.services.user_service import UserService
from app.utils.auth import Actor, require_roles
from app.utils.errors import Conflict, Forbidden, Unauthorized
from app.utils.roles import Role
from app.utils.security import verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == credentials.email.strip().lower()).first()
    if not db_user or not verify_password(credentials.password, db_user.hashed_password):
        logger.warning(f"Failed login for {credentials.email}")
        raise Unauthorized("Invalid credentials")

    if not db_user.is_active:
        raise Unauthorized("Account has been deactivated. Please contact administrator.")

    token = create_access_token(data={"sub": db_user.id, "role": db_user.role})
    logger.info(f"User {db_user.uid} logged in")
    return {"token": token, "token_type": "bearer", "user": db_user}


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    user: UserCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles(Role.ADMIN)),
):
    """Admin-only account creation"""
    service = UserService(db)
    new_user = service.create_user(user)
    service.commit()
    db.refresh(new_user)
    return new_user


@router.post("/seed-admin", response_model=SeedAdminOut, status_code=status.HTTP_201_CREATED)
def seed_admin(db: Session = Depends(get_db)):
    """Create the first admin from SEED_ADMIN_* settings; refused once any admin exists"""
    if db.query(User).filter(User.role == Role.ADMIN.value).first():
        raise Forbidden("Admin already exists")

    seed = settings.SEED_ADMIN
    service = UserService(db)
    if service.email_taken(seed['email']):
        raise Conflict("Seed admin email is already used by another account")

    admin = service.create_user(UserCreate(
        name=seed['name'],
        email=seed['email'],
        password=seed['password'],
        role=Role.ADMIN.value,
    ))
    service.commit()
    logger.info(f"Seed admin {admin.email} created")
    return {"message": "Admin created", "email": admin.email}
