from datetime import datetime, timedelta
from types import SimpleNamespace

from app.services.group_service import group_analytics, member_analytics

DUE = datetime(2026, 3, 1, 12, 0)


def make_task(assignee, status="Todo", completed_at=None, due=DUE):
    return SimpleNamespace(assigned_user_id=assignee, status=status, completed_at=completed_at, due=due)


def test_member_analytics_classifies_completion():
    member = SimpleNamespace(id="m1")
    tasks = [
        make_task("m1", "Completed", DUE - timedelta(days=1)),
        make_task("m1", "Closed", DUE + timedelta(hours=2)),
        make_task("m1", "Completed", DUE + timedelta(days=1), due=None),
        make_task("m1", "InProgress"),
        make_task("m2", "Completed", DUE - timedelta(days=3)),
    ]

    stats = member_analytics(member, tasks)

    assert stats["assigned"] == 4
    assert stats["completed"] == 3
    assert stats["completed_on_time"] == 1
    assert stats["delayed"] == 1


def test_completion_exactly_at_due_is_on_time():
    member = SimpleNamespace(id="m1")
    stats = member_analytics(member, [make_task("m1", "Completed", DUE)])
    assert stats["completed_on_time"] == 1
    assert stats["delayed"] == 0


def test_group_analytics_totals():
    lead = SimpleNamespace(id="lead")
    member = SimpleNamespace(id="m1")
    group = SimpleNamespace(id="g" * 32, gid=101, title="Ops", members=[lead, member])
    tasks = [
        make_task("m1", "Completed", DUE),
        make_task(None, "Todo"),
        make_task("lead", "InProgress"),
    ]

    report = group_analytics(group, tasks)

    assert report["total_tasks"] == 3
    assert report["completed_tasks"] == 1
    assert report["status_counts"] == {"Todo": 1, "InProgress": 1, "Completed": 1, "Closed": 0}
    assert [m["user"].id for m in report["members"]] == ["lead", "m1"]
    assert report["members"][1]["completed_on_time"] == 1
