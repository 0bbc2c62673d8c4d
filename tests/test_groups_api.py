from datetime import timedelta

from app.models import Task
from app.utils.dates import utcnow
from tests.conftest import bearer


def create_group(client, actor, **fields):
    payload = {"title": "Platform", "description": "APIs and infra"}
    payload.update(fields)
    return client.post("/groups", json=payload, headers=bearer(actor))


def member_ids(group):
    return {member["id"] for member in group["members"]}


def test_group_scenario(client, manager, manager2, employee):
    created = create_group(client, manager, lead_id=manager2.id, member_ids=[employee.id])
    assert created.status_code == 201
    group = created.json()
    assert group["lead"]["id"] == manager2.id
    assert member_ids(group) == {manager2.id, employee.id}

    task = client.post("/tasks", json={"title": "T1", "description": "D1"}, headers=bearer(manager)).json()
    url = f"/groups/{group['id']}/tasks"

    first = client.patch(url, json={"task_id": task["id"]}, headers=bearer(manager))
    assert first.status_code == 200
    assert [entry["task_id"] for entry in first.json()["tasks"]] == [task["id"]]

    second = client.patch(url, json={"task_id": str(task["tid"])}, headers=bearer(manager))
    assert second.status_code == 409


def test_adding_task_does_not_change_assignment(client, db, admin, manager, employee):
    group = create_group(client, admin, lead_id=manager.id).json()
    task = client.post("/tasks", json={
        "title": "T", "description": "D", "assignee_id": employee.id,
    }, headers=bearer(admin)).json()

    client.patch(f"/groups/{group['id']}/tasks", json={"task_id": task["id"]}, headers=bearer(admin))
    after = client.get(f"/tasks/{task['id']}", headers=bearer(admin)).json()
    assert after["assigned_to"] == {"user": employee.id, "group": None}


def test_duplicate_members_and_lead_are_collapsed(client, admin, manager, employee):
    group = create_group(
        client, admin, lead_id=str(manager.uid), member_ids=[employee.id, str(employee.uid), manager.id],
    ).json()
    assert len(group["members"]) == 2


def test_invalid_lead_and_members(client, admin, manager, employee, make_user):
    assert create_group(client, admin, lead_id=employee.id).status_code == 400
    assert create_group(client, admin, lead_id=admin.id).status_code == 400

    inactive = make_user("Old", "old@acme.io", "employee", is_active=False)
    response = create_group(client, admin, lead_id=manager.id, member_ids=[inactive.id])
    assert response.status_code == 400

    assert create_group(client, admin, lead_id=manager.id, member_ids=[admin.id]).status_code == 400


def test_employee_cannot_create_group(client, manager, employee):
    assert create_group(client, employee, lead_id=manager.id).status_code == 403


def test_update_keeps_lead_in_members(client, admin, manager, manager2, employee, employee2):
    group = create_group(client, admin, lead_id=manager.id, member_ids=[employee.id]).json()
    url = f"/groups/{group['id']}"

    replaced = client.patch(url, json={"member_ids": [employee2.id]}, headers=bearer(manager))
    assert replaced.status_code == 200
    assert member_ids(replaced.json()) == {manager.id, employee2.id}

    new_lead = client.patch(url, json={"lead_id": manager2.id}, headers=bearer(admin))
    assert new_lead.json()["lead"]["id"] == manager2.id
    assert manager2.id in member_ids(new_lead.json())

    # The creator and the lead may modify; a plain member may not
    denied = client.patch(url, json={"title": "Mine"}, headers=bearer(employee2))
    assert denied.status_code == 403

    assert client.patch(url, json={}, headers=bearer(admin)).status_code == 400


def test_inactive_group_rejects_tasks(client, admin, manager):
    group = create_group(client, admin, lead_id=manager.id).json()
    client.patch(f"/groups/{group['id']}", json={"is_active": False}, headers=bearer(admin))
    task = client.post("/tasks", json={"title": "T", "description": "D"}, headers=bearer(admin)).json()

    response = client.patch(f"/groups/{group['id']}/tasks", json={"task_id": task["id"]}, headers=bearer(admin))
    assert response.status_code == 400

    assign = client.patch(f"/tasks/{task['id']}/assign", json={"group_id": group["id"]}, headers=bearer(admin))
    assert assign.status_code == 400


def test_group_visibility(client, admin, manager, manager2, employee, employee2):
    group = create_group(client, admin, lead_id=manager.id, member_ids=[employee.id]).json()
    url = f"/groups/{group['gid']}"

    assert client.get(url, headers=bearer(manager)).status_code == 200
    assert client.get(url, headers=bearer(employee)).status_code == 200
    assert client.get(url, headers=bearer(manager2)).status_code == 404
    assert client.get(url, headers=bearer(employee2)).status_code == 404

    mine = client.get("/groups/my", headers=bearer(employee)).json()
    assert [g["id"] for g in mine["data"]] == [group["id"]]
    assert client.get("/groups/my", headers=bearer(employee2)).json()["total"] == 0

    listed = client.get("/groups", params={"is_active": True}, headers=bearer(manager2)).json()
    assert listed["total"] == 0


def test_group_analytics(client, db, admin, manager, employee, employee2):
    group = create_group(client, admin, lead_id=manager.id, member_ids=[employee.id, employee2.id]).json()
    due = (utcnow() + timedelta(days=3)).isoformat()

    def add(assignee, **extra):
        task = client.post("/tasks", json=dict(
            {"title": "T", "description": "D", "assignee_id": assignee.id}, **extra,
        ), headers=bearer(admin)).json()
        client.patch(f"/groups/{group['id']}/tasks", json={"task_id": task["id"]}, headers=bearer(admin))
        return task

    on_time = add(employee, due=due)
    late = add(employee, due=due)
    add(employee2)

    client.patch(f"/tasks/{on_time['id']}/status", json={"status": "Completed"}, headers=bearer(employee))
    client.patch(f"/tasks/{late['id']}/status", json={"status": "Completed"}, headers=bearer(employee))
    db.expire_all()
    late_task = db.get(Task, late["id"])
    late_task.completed_at = late_task.due + timedelta(hours=1)
    db.commit()

    report = client.get(f"/groups/{group['id']}/analytics", headers=bearer(manager)).json()
    assert report["total_tasks"] == 3
    assert report["completed_tasks"] == 2
    stats = {m["user"]["id"]: m for m in report["members"]}
    assert stats[employee.id]["assigned"] == 2
    assert stats[employee.id]["completed_on_time"] == 1
    assert stats[employee.id]["delayed"] == 1
    assert stats[employee2.id]["completed"] == 0
    assert stats[manager.id]["assigned"] == 0


def test_delete_group_admin_only(client, admin, manager, employee):
    group = create_group(client, manager, lead_id=manager.id, member_ids=[employee.id]).json()
    task = client.post("/tasks", json={
        "title": "T", "description": "D", "group_id": group["id"],
    }, headers=bearer(manager)).json()

    assert client.delete(f"/groups/{group['id']}", headers=bearer(manager)).status_code == 403
    assert client.delete(f"/groups/{group['id']}", headers=bearer(admin)).status_code == 200

    after = client.get(f"/tasks/{task['id']}", headers=bearer(admin)).json()
    assert after["assigned_to"] == {"user": None, "group": None}
