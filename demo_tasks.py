"""
Demo Tasks Data for the TaskFlow backend
Each task is created by a manager and assigned to an employee or a group
"""

from datetime import timedelta

from app.utils.dates import utcnow
from app.utils.roles import TaskStatus, TaskPriority

now = utcnow()

# Structure: title, description, creator, assignee or group, final status, priority, due
DEMO_TASKS = [
    {
        "title": "Design new user interface mockups",
        "description": "Create wireframes and mockups for the redesigned customer portal homepage and navigation",
        "created_by": "rajesh.kumar@taskflow.io",
        "assignee": "priya.sharma@taskflow.io",
        "status": TaskStatus.IN_PROGRESS,
        "priority": TaskPriority.HIGH,
        "due": now + timedelta(days=5),
    },
    {
        "title": "Implement responsive navigation component",
        "description": "Develop the responsive navigation component with a mobile-first approach",
        "created_by": "rajesh.kumar@taskflow.io",
        "assignee": "arjun.patel@taskflow.io",
        "status": TaskStatus.TODO,
        "priority": TaskPriority.MEDIUM,
        "due": now + timedelta(days=15),
    },
    {
        "title": "Migrate task tables to PostgreSQL 16",
        "description": "Plan and run the database upgrade with a rollback path",
        "created_by": "anita.desai@taskflow.io",
        "group": "Platform Team",
        "status": TaskStatus.TODO,
        "priority": TaskPriority.HIGH,
        "due": now + timedelta(days=20),
    },
    {
        "title": "Set up CI pipeline caching",
        "description": "Cache dependency installs to cut pipeline time",
        "created_by": "anita.desai@taskflow.io",
        "assignee": "sneha.reddy@taskflow.io",
        "status": TaskStatus.COMPLETED,
        "priority": TaskPriority.LOW,
        "due": now + timedelta(days=2),
    },
    {
        "title": "Write API rate limit runbook",
        "description": "Document how to raise and lower per-client limits during incidents",
        "created_by": "anita.desai@taskflow.io",
        "assignee": "vikram.singh@taskflow.io",
        "status": TaskStatus.CLOSED,
        "priority": TaskPriority.MEDIUM,
        "due": None,
    },
]
