from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from .user import UserBrief

class GroupCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    lead_id: str
    member_ids: List[str] = []

class GroupUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    lead_id: Optional[str] = None
    member_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None

class GroupTaskAdd(BaseModel):
    task_id: str

class GroupTaskOut(BaseModel):
    task_id: str
    status: str
    assigned_by: str
    assigned_at: datetime

    model_config = {
        "from_attributes": True
    }

class GroupOut(BaseModel):
    id: str
    gid: Optional[int] = None
    title: str
    description: str
    lead: UserBrief
    members: List[UserBrief]
    tasks: List[GroupTaskOut] = []
    created_by: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }

class MemberAnalytics(BaseModel):
    user: UserBrief
    assigned: int
    completed: int
    completed_on_time: int
    delayed: int

class GroupAnalytics(BaseModel):
    group_id: str
    gid: Optional[int] = None
    title: str
    total_tasks: int
    completed_tasks: int
    status_counts: Dict[str, int]
    members: List[MemberAnalytics]
