import pytest

from tests.conftest import bearer


@pytest.fixture
def activity(client, admin, manager, employee, employee2):
    group = client.post("/groups", json={
        "title": "Ops", "description": "Operations", "lead_id": manager.id, "member_ids": [employee2.id],
    }, headers=bearer(admin)).json()

    def task(priority, **extra):
        return client.post("/tasks", json=dict(
            {"title": f"{priority} task", "description": "D", "priority": priority}, **extra,
        ), headers=bearer(manager)).json()

    done = task("High", assignee_id=employee.id)
    client.patch(f"/tasks/{done['id']}/status", json={"status": "Completed"}, headers=bearer(employee))

    group_done = task("Low", group_id=group["id"])
    client.patch(f"/tasks/{group_done['id']}/status", json={"status": "Completed"}, headers=bearer(manager))

    moved = task("Medium", assignee_id=employee.id)
    client.patch(f"/tasks/{moved['id']}/assign", json={"assignee_id": employee2.id}, headers=bearer(manager))
    client.patch(f"/tasks/{moved['id']}/assign", json={"assignee_id": employee.id}, headers=bearer(manager))
    return {"group": group, "moved": moved}


def test_dashboard_is_admin_only(client, manager, employee):
    assert client.get("/admin/dashboard/summary", headers=bearer(manager)).status_code == 403
    assert client.get("/admin/dashboard/summary", headers=bearer(employee)).status_code == 403
    assert client.get("/admin/dashboard/summary").status_code == 401


def test_summary_and_breakdowns(client, admin, activity):
    headers = bearer(admin)
    summary = client.get("/admin/dashboard/summary", headers=headers).json()
    assert summary == {"total_users": 4, "total_tasks": 3, "completed_tasks": 2, "active_groups": 1}

    by_status = client.get("/admin/dashboard/tasks-by-status", headers=headers).json()
    assert by_status == {"Todo": 1, "InProgress": 0, "Completed": 2, "Closed": 0}

    by_priority = client.get("/admin/dashboard/tasks-by-priority", headers=headers).json()
    assert by_priority == {"Low": 1, "Medium": 1, "High": 1}

    over_time = client.get("/admin/dashboard/tasks-over-time", headers=headers).json()
    assert sum(day["count"] for day in over_time) == 3


def test_performance_reports(client, admin, employee, activity):
    headers = bearer(admin)
    users = client.get("/admin/dashboard/user-performance", headers=headers).json()
    assert users == [{"user_id": employee.id, "uid": employee.uid, "user_name": employee.name, "completed_tasks": 1}]

    groups = client.get("/admin/dashboard/group-performance", headers=headers).json()
    assert [(g["group_id"], g["completed_tasks"]) for g in groups] == [(activity["group"]["id"], 1)]

    reassignments = client.get("/admin/dashboard/reassignments", headers=headers).json()
    assert reassignments["total"] == 2
    assert reassignments["tasks"][0]["task_id"] == activity["moved"]["id"]
    assert reassignments["tasks"][0]["reassignments"] == 2
