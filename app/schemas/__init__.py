from .common import Page, Message
from .user import UserCreate, UserLogin, UserOut, UserBrief, UserUpdate, PasswordChange, UserActiveState
from .tokens import Token, SeedAdminOut
from .group import GroupCreate, GroupUpdate, GroupTaskAdd, GroupTaskOut, GroupOut, MemberAnalytics, GroupAnalytics
from .task import (
    Attachment, TaskCreate, TaskUpdate, TaskStatusUpdate, TaskAssign, TaskReopen, CommentCreate,
    StatusRecordOut, AssignmentOut, HistoryEntryOut, CommentOut, TaskOut,
)
from .user_task import LedgerEntryOut, LedgerOut, LedgerAssign, LedgerStatusUpdate
from .notification import NotificationOut, NotificationMarkAllRead
