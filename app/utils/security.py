# app/utils/security.py
from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config.settings import settings
from app.utils.dates import utcnow

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed hash in storage never authenticates
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.AUTH['access_token_expire_minutes']))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.AUTH['secret_key'], algorithm=settings.AUTH['algorithm'])


def decode_access_token(token: str) -> dict:
    """Raises JWTError when the token is malformed, tampered with or expired"""
    return jwt.decode(token, settings.AUTH['secret_key'], algorithms=[settings.AUTH['algorithm']])
