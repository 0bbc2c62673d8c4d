from tests.conftest import bearer


def new_task(client, actor, **fields):
    payload = {"title": "Ledger task", "description": "Tracked per user"}
    payload.update(fields)
    return client.post("/tasks", json=payload, headers=bearer(actor)).json()


def test_ledger_follows_assignment(client, manager, employee):
    task = new_task(client, manager, assignee_id=employee.id)

    ledger = client.get(f"/user-tasks/{employee.id}", headers=bearer(employee))
    assert ledger.status_code == 200
    body = ledger.json()
    assert body["total"] == 1
    assert body["assigned_tasks"][0]["task_id"] == task["id"]
    assert body["assigned_tasks"][0]["status"] == "Todo"


def test_ledger_visible_to_self_and_admin_only(client, admin, manager, employee, employee2):
    url = f"/user-tasks/{employee.uid}"
    assert client.get(url, headers=bearer(employee)).status_code == 200
    assert client.get(url, headers=bearer(admin)).status_code == 200
    assert client.get(url, headers=bearer(employee2)).status_code == 403
    assert client.get(url, headers=bearer(manager)).status_code == 403


def test_assign_through_ledger(client, manager, employee):
    task = new_task(client, manager)

    response = client.post(
        f"/user-tasks/{employee.id}/tasks",
        json={"task_id": task["id"], "status": "InProgress"},
        headers=bearer(manager),
    )
    assert response.status_code == 201
    entries = response.json()["assigned_tasks"]
    assert [(e["task_id"], e["status"]) for e in entries] == [(task["id"], "InProgress")]

    detail = client.get(f"/tasks/{task['id']}", headers=bearer(employee)).json()
    assert detail["assigned_to"]["user"] == employee.id
    assert detail["status"]["status"] == "InProgress"

    filtered = client.get(f"/user-tasks/{employee.id}", params={"status": "Todo"}, headers=bearer(employee))
    assert filtered.json()["total"] == 0


def test_ledger_assign_rules(client, manager, manager2, employee):
    task = new_task(client, manager)
    url = f"/user-tasks/{manager2.id}/tasks"
    assert client.post(url, json={"task_id": task["id"]}, headers=bearer(manager)).status_code == 403
    assert client.post(url, json={"task_id": task["id"]}, headers=bearer(employee)).status_code == 403

    missing = client.post(f"/user-tasks/{employee.id}/tasks", json={"task_id": "424242"}, headers=bearer(manager))
    assert missing.status_code == 404


def test_employee_updates_own_ledger_status(client, db, manager, employee, employee2):
    task = new_task(client, manager, assignee_id=employee.id)
    url = f"/user-tasks/{employee.id}/tasks/{task['id']}"

    response = client.patch(url, json={"status": "Completed"}, headers=bearer(employee))
    assert response.status_code == 200
    assert response.json()["assigned_tasks"][0]["status"] == "Completed"

    detail = client.get(f"/tasks/{task['id']}", headers=bearer(manager)).json()
    assert detail["status"]["status"] == "Completed"

    assert client.patch(url, json={"status": "Todo"}, headers=bearer(employee2)).status_code == 403

    unknown = client.patch(f"/user-tasks/{employee.id}/tasks/{'0' * 32}", json={"status": "Todo"},
                           headers=bearer(employee))
    assert unknown.status_code == 404


def test_remove_from_ledger_unassigns(client, manager, employee):
    task = new_task(client, manager, assignee_id=employee.id)
    url = f"/user-tasks/{employee.id}/tasks/{task['id']}"

    assert client.delete(url, headers=bearer(employee)).status_code == 403

    removed = client.delete(url, headers=bearer(manager))
    assert removed.status_code == 200

    assert client.get(f"/user-tasks/{employee.id}", headers=bearer(employee)).json()["total"] == 0
    detail = client.get(f"/tasks/{task['id']}", headers=bearer(manager)).json()
    assert detail["assigned_to"] == {"user": None, "group": None}

    assert client.delete(url, headers=bearer(manager)).status_code == 404
