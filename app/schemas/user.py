from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime

from app.config.settings import settings

PASSWORD_MIN_LENGTH = settings.AUTH['password_min_length']


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    role: str

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserBrief(BaseModel):
    id: str
    uid: Optional[int] = None
    name: str
    email: str
    role: str

    model_config = {
        "from_attributes": True
    }

class UserOut(BaseModel):
    id: str
    uid: Optional[int] = None
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None

class PasswordChange(BaseModel):
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)

class UserActiveState(BaseModel):
    id: str
    uid: Optional[int] = None
    is_active: bool

    model_config = {
        "from_attributes": True
    }
