from app.models.counter import Counter, next_sequence, assign_sequence, new_id
from app.models.user import User, UserTaskEntry
from app.models.task import Task, TaskHistory, TaskComment, HistoryKind
from app.models.group import Group, GroupTask, group_members
from app.models.notification import Notification, NotificationType
