# app/schemas/task.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List

from app.config.settings import settings
from app.utils.dates import to_naive_utc
from app.utils.roles import TaskStatus, TaskPriority

MAX_ATTACHMENTS = settings.TASKS['max_attachments']


class Attachment(BaseModel):
    id: Optional[str] = None
    name: str
    type: Optional[str] = None
    size: Optional[int] = Field(None, ge=0)
    data_url: Optional[str] = None


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    priority: TaskPriority = TaskPriority.MEDIUM
    due: Optional[datetime] = None
    assignee_id: Optional[str] = None
    group_id: Optional[str] = None
    attachments: List[Attachment] = Field(default_factory=list, max_length=MAX_ATTACHMENTS)

    @field_validator('title', 'description')
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

    @field_validator('due')
    @classmethod
    def due_as_utc(cls, v):
        return to_naive_utc(v)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    priority: Optional[TaskPriority] = None
    due: Optional[datetime] = None
    attachments: Optional[List[Attachment]] = Field(None, max_length=MAX_ATTACHMENTS)

    @field_validator('due')
    @classmethod
    def due_as_utc(cls, v):
        return to_naive_utc(v)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus
    comment: Optional[str] = Field(None, max_length=1000)


class TaskAssign(BaseModel):
    assignee_id: Optional[str] = None
    group_id: Optional[str] = None


class TaskReopen(BaseModel):
    comment: Optional[str] = Field(None, max_length=1000)


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=1000)

    @field_validator('comment')
    @classmethod
    def strip_comment(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v


# For returning task data
class StatusRecordOut(BaseModel):
    status: TaskStatus
    updated_at: datetime
    updated_by: Optional[str] = None


class AssignmentOut(BaseModel):
    user: Optional[str] = None
    group: Optional[str] = None


class HistoryEntryOut(BaseModel):
    kind: str
    status: TaskStatus
    updated_at: datetime
    updated_by: Optional[str] = None
    comment: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class CommentOut(BaseModel):
    id: int
    user_id: str
    comment: str
    created_at: datetime

    model_config = {
        "from_attributes": True
    }


class TaskOut(BaseModel):
    id: str
    tid: Optional[int] = None
    title: str
    description: str
    priority: TaskPriority
    due: Optional[datetime] = None
    attachments: List[Attachment] = []
    created_by: str
    assigned_to: AssignmentOut
    status: StatusRecordOut = Field(validation_alias="current_status")
    status_history: List[HistoryEntryOut] = []
    comments: List[CommentOut] = []
    completed_at: Optional[datetime] = None
    reopened: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
