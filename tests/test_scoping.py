import pytest

from app.models import Task
from app.schemas.group import GroupCreate
from app.schemas.task import TaskCreate
from app.services.group_service import GroupService
from app.services.task_service import TaskService
from app.utils.errors import Forbidden, InvalidFilter, InvalidInput, NotFound
from app.utils.scoping import ScopeManager


def visible_task_ids(db, actor):
    return {task.id for task in db.query(Task).filter(ScopeManager(db).task_scope(actor)).all()}


@pytest.fixture
def board(db, admin, manager, manager2, employee, employee2, actor_for):
    """Tasks spread across direct and group assignment"""
    group = GroupService(db, actor_for(admin)).create(GroupCreate(
        title="Support", description="Tier two", lead_id=manager2.id, member_ids=[employee2.id],
    ))
    db.commit()

    service = TaskService(db, actor_for(manager))
    mine = service.create_task(TaskCreate(title="Direct", description="for eve", assignee_id=employee.id))
    grouped = service.create_task(TaskCreate(title="Grouped", description="for support", group_id=group.id))
    loose = TaskService(db, actor_for(admin)).create_task(TaskCreate(title="Loose", description="nobody"))
    db.commit()
    return {"group": group, "direct": mine, "grouped": grouped, "loose": loose}


def test_admin_sees_every_task(db, admin, board, actor_for):
    assert visible_task_ids(db, actor_for(admin)) == {board["direct"].id, board["grouped"].id, board["loose"].id}


def test_manager_sees_created_tasks(db, manager, board, actor_for):
    assert visible_task_ids(db, actor_for(manager)) == {board["direct"].id, board["grouped"].id}


def test_lead_sees_group_tasks(db, manager2, board, actor_for):
    assert visible_task_ids(db, actor_for(manager2)) == {board["grouped"].id}


def test_employee_sees_direct_and_group_tasks_only(db, employee, employee2, board, actor_for):
    assert visible_task_ids(db, actor_for(employee)) == {board["direct"].id}
    assert visible_task_ids(db, actor_for(employee2)) == {board["grouped"].id}


def test_out_of_scope_task_is_not_found(db, employee, board, actor_for):
    with pytest.raises(NotFound):
        ScopeManager(db).get_task(actor_for(employee), board["loose"].id)
    with pytest.raises(NotFound):
        ScopeManager(db).get_task(actor_for(employee), str(board["grouped"].tid))


def test_malformed_id_is_invalid_input(db, employee, actor_for):
    with pytest.raises(InvalidInput):
        ScopeManager(db).get_task(actor_for(employee), "not-an-id")


def test_group_scope(db, admin, manager, manager2, employee2, board, actor_for):
    scope = ScopeManager(db)
    group = board["group"]
    for viewer in (admin, manager2, employee2):
        assert scope.get_group(actor_for(viewer), group.id).id == group.id
    with pytest.raises(NotFound):
        scope.get_group(actor_for(manager), str(group.gid))


def test_user_scope_role_filters(db, admin, manager, employee, actor_for):
    scope = ScopeManager(db)
    with pytest.raises(InvalidFilter):
        scope.user_scope(actor_for(admin), "intern")
    with pytest.raises(Forbidden):
        scope.user_scope(actor_for(manager), "admin")
    assert scope.validate_role_filter(actor_for(manager), " Employee ") == "employee"


def test_everyone_can_see_themselves(db, manager, employee, actor_for):
    scope = ScopeManager(db)
    assert scope.get_user(actor_for(manager), manager.id).id == manager.id
    assert scope.get_user(actor_for(employee), str(employee.uid)).id == employee.id
    with pytest.raises(NotFound):
        scope.get_user(actor_for(employee), manager.id)


def test_non_ascii_digits_are_invalid_input(db, admin, actor_for):
    with pytest.raises(InvalidInput):
        ScopeManager(db).get_task(actor_for(admin), "²")


def test_oversized_sequential_id_is_not_found(db, admin, board, actor_for):
    with pytest.raises(NotFound):
        ScopeManager(db).get_task(actor_for(admin), "99999999999999999999999")


def test_leading_zeros_still_match_sequential_id(db, admin, board, actor_for):
    task = board["direct"]
    padded = str(task.tid).rjust(15, "0")
    assert ScopeManager(db).get_task(actor_for(admin), padded).id == task.id


def test_odd_ids_over_http(client, admin, auth):
    assert client.get("/tasks/²", headers=auth(admin)).status_code == 400
    assert client.get("/tasks/99999999999999999999999", headers=auth(admin)).status_code == 404
