# app/schemas/tokens.py
from pydantic import BaseModel
from app.schemas.user import UserOut

class Token(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserOut

    model_config = {
        "from_attributes": True
    }

class SeedAdminOut(BaseModel):
    message: str
    email: str
