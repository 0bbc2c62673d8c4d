"""
Master Database Seeding Script
Creates database tables and populates them with demo data through the service layer,
so every demo record goes through the same validation as an API request
"""

from create_tables import create_tables
from demo_users import DEMO_USERS
from demo_groups import DEMO_GROUPS
from demo_tasks import DEMO_TASKS

from app.config.settings import settings
from app.database import SessionLocal
from app.models import Group, Task, User
from app.schemas.group import GroupCreate
from app.schemas.task import TaskCreate
from app.schemas.user import UserCreate
from app.services.group_service import GroupService
from app.services.task_service import TaskService
from app.services.user_service import UserService
from app.utils.auth import Actor
from app.utils.roles import Role


def banner(title: str):
    print(f"\n{'='*60}")
    print(f"🚀 {title}")
    print(f"{'='*60}")


def get_user(db, email: str) -> User:
    return db.query(User).filter(User.email == email.lower()).first()


def seed_admin(db) -> User:
    banner("Creating Admin")
    seed = settings.SEED_ADMIN
    admin = get_user(db, seed['email'])
    if admin:
        print(f"[SKIP] Admin {admin.email} already exists")
        return admin

    admin = UserService(db).create_user(UserCreate(
        name=seed['name'], email=seed['email'], password=seed['password'], role=Role.ADMIN.value,
    ))
    db.commit()
    print(f"[SUCCESS] Created admin: {admin.email}")
    return admin


def seed_demo_users(db):
    banner("Creating Demo Users")
    service = UserService(db)
    created = 0
    for user_data in DEMO_USERS:
        if get_user(db, user_data['email']):
            print(f"[SKIP] User {user_data['email']} already exists, skipping...")
            continue
        user = service.create_user(UserCreate(**user_data))
        db.commit()
        created += 1
        print(f"[SUCCESS] Created user: {user.name} ({user.role}, uid {user.uid})")
    print(f"\n[SUCCESS] Successfully created {created} demo users!")


def seed_demo_groups(db, admin: User):
    banner("Creating Demo Groups")
    service = GroupService(db, Actor.from_user(admin))
    created = 0
    for group_data in DEMO_GROUPS:
        if db.query(Group).filter(Group.title == group_data['title']).first():
            print(f"[SKIP] Group {group_data['title']} already exists, skipping...")
            continue
        lead = get_user(db, group_data['lead'])
        members = [get_user(db, email) for email in group_data['members']]
        group = service.create(GroupCreate(
            title=group_data['title'],
            description=group_data['description'],
            lead_id=lead.id,
            member_ids=[member.id for member in members if member is not None],
        ))
        db.commit()
        created += 1
        print(f"[SUCCESS] Created group: {group.title} (gid {group.gid}, members: {len(group.members)})")
    print(f"\n[SUCCESS] Successfully created {created} demo groups!")


def seed_demo_tasks(db):
    banner("Creating Demo Tasks")
    created = 0
    for task_data in DEMO_TASKS:
        if db.query(Task).filter(Task.title == task_data['title']).first():
            print(f"[SKIP] Task '{task_data['title']}' already exists, skipping...")
            continue

        creator = get_user(db, task_data['created_by'])
        service = TaskService(db, Actor.from_user(creator))

        assignee = get_user(db, task_data['assignee']) if task_data.get('assignee') else None
        group = db.query(Group).filter(Group.title == task_data['group']).first() if task_data.get('group') else None

        task = service.create_task(TaskCreate(
            title=task_data['title'],
            description=task_data['description'],
            priority=task_data['priority'],
            due=task_data['due'],
            assignee_id=assignee.id if assignee else None,
            group_id=group.id if group else None,
        ))
        service.update_status(task, task_data['status'], comment="Seeded")
        db.commit()
        created += 1
        print(f"[SUCCESS] Created task: {task.title} (tid {task.tid}, {task.status})")
    print(f"\n[SUCCESS] Successfully created {created} demo tasks!")


def main():
    create_tables()
    db = SessionLocal()
    try:
        admin = seed_admin(db)
        seed_demo_users(db)
        seed_demo_groups(db, admin)
        seed_demo_tasks(db)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    print("\n🎉 Demo data ready")
    print(f"   Admin login: {settings.SEED_ADMIN['email']} / {settings.SEED_ADMIN['password']}")
    print("   Other users: <email from demo_users.py> / password123")


if __name__ == "__main__":
    main()
