from pydantic import BaseModel
from typing import List
from datetime import datetime

from app.utils.roles import TaskStatus


class LedgerEntryOut(BaseModel):
    task_id: str
    status: TaskStatus
    assigned_at: datetime
    assigned_by: str

    model_config = {
        "from_attributes": True
    }


class LedgerOut(BaseModel):
    user_id: str
    assigned_tasks: List[LedgerEntryOut]
    total: int


class LedgerAssign(BaseModel):
    task_id: str
    status: TaskStatus = TaskStatus.TODO


class LedgerStatusUpdate(BaseModel):
    status: TaskStatus
