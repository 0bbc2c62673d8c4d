def emails(response):
    return [user["email"] for user in response.json()["data"]]


def test_user_listing_scenario(client, admin, manager, employee, employee2, auth):
    as_manager = client.get("/users", headers=auth(manager))
    assert as_manager.status_code == 200
    assert emails(as_manager) == ["eve@acme.io", "finn@acme.io"]

    forbidden = client.get("/users", params={"role": "admin"}, headers=auth(manager))
    assert forbidden.status_code == 403
    assert client.get("/users", params={"role": "manager"}, headers=auth(manager)).status_code == 403

    as_employee = client.get("/users", headers=auth(employee))
    assert emails(as_employee) == ["eve@acme.io"]

    as_admin = client.get("/users", headers=auth(admin))
    assert as_admin.json()["total"] == 4


def test_invalid_role_filter_is_bad_request(client, admin, auth):
    response = client.get("/users", params={"role": "intern"}, headers=auth(admin))
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid role filter"


def test_pagination(client, admin, make_user, auth):
    for n in range(4):
        make_user(f"Temp {n}", f"temp{n}@acme.io", "employee")

    page = client.get("/users", params={"page": 2, "limit": 2}, headers=auth(admin)).json()
    assert page["page"] == 2
    assert page["limit"] == 2
    assert page["total"] == 5
    assert len(page["data"]) == 2

    assert client.get("/users", params={"limit": 500}, headers=auth(admin)).status_code == 400


def test_get_user_by_either_id(client, manager, employee, auth):
    by_uid = client.get(f"/users/{employee.uid}", headers=auth(manager))
    by_id = client.get(f"/users/{employee.id}", headers=auth(manager))
    assert by_uid.status_code == by_id.status_code == 200
    assert by_uid.json() == by_id.json()

    assert client.get(f"/users/{manager.id}", headers=auth(employee)).status_code == 404
    assert client.get("/users/nope", headers=auth(manager)).status_code == 400


def test_create_user_admin_only(client, admin, manager, auth):
    payload = {"name": "Omar", "email": "omar@acme.io", "password": "abcdef", "role": "manager"}
    assert client.post("/users", json=payload, headers=auth(manager)).status_code == 403

    created = client.post("/users", json=payload, headers=auth(admin))
    assert created.status_code == 201
    assert created.json()["uid"] is not None

    bad_role = dict(payload, email="omar2@acme.io", role="owner")
    assert client.post("/users", json=bad_role, headers=auth(admin)).status_code == 400

    short_password = dict(payload, email="omar3@acme.io", password="abc")
    assert client.post("/users", json=short_password, headers=auth(admin)).status_code == 400


def test_self_update_limited_to_profile_fields(client, employee, auth):
    renamed = client.patch(f"/users/{employee.id}", json={"name": "Eve E."}, headers=auth(employee))
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Eve E."

    promote = client.patch(f"/users/{employee.id}", json={"role": "admin"}, headers=auth(employee))
    assert promote.status_code == 403


def test_admin_changes_role_and_email_conflict(client, admin, employee, employee2, auth):
    response = client.patch(f"/users/{employee.uid}", json={"role": "Manager"}, headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["role"] == "manager"

    taken = client.patch(f"/users/{employee.uid}", json={"email": "finn@acme.io"}, headers=auth(admin))
    assert taken.status_code == 409


def test_toggle_active(client, admin, employee, auth):
    response = client.patch(f"/users/{employee.id}/toggle", headers=auth(admin))
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get("/users/me", headers=auth(employee)).status_code == 401


def test_admin_cannot_deactivate_or_demote_self_through_update(client, admin, auth):
    deactivate = client.patch(f"/users/{admin.id}", json={"is_active": False}, headers=auth(admin))
    assert deactivate.status_code == 400
    assert deactivate.json()["message"] == "You cannot deactivate your own account"

    demote = client.patch(f"/users/{admin.id}", json={"role": "employee"}, headers=auth(admin))
    assert demote.status_code == 400

    assert client.get("/users/me", headers=auth(admin)).json()["is_active"] is True
    renamed = client.patch(f"/users/{admin.id}", json={"name": "Ada L", "role": "Admin"}, headers=auth(admin))
    assert renamed.status_code == 200

def test_change_password(client, admin, employee, employee2, auth):
    own = client.patch(f"/users/{employee.id}/password", json={"password": "newpass1"}, headers=auth(employee))
    assert own.status_code == 200
    assert client.post("/auth/login", json={"email": "eve@acme.io", "password": "newpass1"}).status_code == 200

    other = client.patch(f"/users/{employee.id}/password", json={"password": "newpass2"}, headers=auth(employee2))
    assert other.status_code == 404

    short = client.patch(f"/users/{employee.id}/password", json={"password": "123"}, headers=auth(admin))
    assert short.status_code == 400


def test_delete_user(client, admin, manager, employee, auth):
    assert client.delete(f"/users/{admin.id}", headers=auth(admin)).status_code == 403

    client.post("/tasks", json={"title": "T", "description": "D", "assignee_id": employee.id}, headers=auth(manager))
    referenced = client.delete(f"/users/{employee.id}", headers=auth(admin))
    assert referenced.status_code == 409

    spare = client.post(
        "/users",
        json={"name": "Spare", "email": "spare@acme.io", "password": "abcdef", "role": "employee"},
        headers=auth(admin),
    ).json()
    assert client.delete(f"/users/{spare['id']}", headers=auth(admin)).status_code == 200
    assert client.get(f"/users/{spare['id']}", headers=auth(admin)).status_code == 404
