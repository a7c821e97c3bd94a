# Tests for task creation, creator/executor permissions and partner delegation

from asyncio import run
from datetime import date, timedelta

import pytest

from council_planner.app.core.roles import EventRole, TaskRole, TaskStatus, UserRole
from council_planner.app.schemas.task import TaskCreate, TaskListQuery, TaskStatusUpdate, TaskUpdate
from council_planner.app.services.task_service import TaskService


TODAY = date.today()


@pytest.fixture
def setup(make_user, make_event, add_membership):
    """An event with a main organizer (creator) and an organizer (executor)."""
    creator = make_user(role=UserRole.ADMIN)
    executor = make_user(role=UserRole.ORGANIZER)
    event_id = make_event(title="Test Event")
    add_membership(event_id, creator, EventRole.MAIN_ORGANIZER)
    add_membership(event_id, executor, EventRole.ORGANIZER)
    return creator, executor, event_id


def _create(event_id, executor_id, creator_id, title="Task"):
    payload = TaskCreate(
        title=title,
        event_id=event_id,
        executor_user_id=executor_id,
        start_date=TODAY,
        end_date=TODAY + timedelta(days=1),
    )
    return run(TaskService.create_task(payload, creator_id))


def test_create_task_inserts_creator_and_executor(setup):
    creator, executor, event_id = setup

    task_id = _create(event_id, executor.id, creator.id, title="New Task")

    task = run(TaskService.get_task(task_id))
    assert task.title == "New Task"
    assert task.event_id == event_id
    assert task.status == TaskStatus.OPEN
    assert task.partner_id is None
    assert len(task.members) == 2
    assert {(m.user_id, m.role) for m in task.members} == {
        (creator.id, TaskRole.CREATOR),
        (executor.id, TaskRole.EXECUTOR),
    }


def test_plain_organizer_can_create_task(setup, make_user):
    _, executor, event_id = setup
    assignee = make_user()

    assert _create(event_id, assignee.id, executor.id) is not None


def test_participant_cannot_create_task(setup, make_user, add_membership):
    _, executor, event_id = setup
    participant = make_user(role=UserRole.ADMIN)
    add_membership(event_id, participant, EventRole.PARTICIPANT)

    assert _create(event_id, executor.id, participant.id) is None
    assert run(TaskService.list_tasks(TaskListQuery(event_id=event_id))) == []


def test_cannot_create_task_on_other_event(setup, make_event):
    creator, executor, _ = setup
    other_event = make_event(title="Other")

    assert _create(other_event, executor.id, creator.id) is None


def test_create_task_requires_existing_executor(setup):
    creator, executor, event_id = setup

    assert _create(event_id, executor.id + 100, creator.id) is None


def test_creator_can_update(setup):
    creator, executor, event_id = setup
    task_id = _create(event_id, executor.id, creator.id, title="To Update")

    updates = TaskUpdate(
        title="Updated Title",
        start_date=TODAY + timedelta(days=1),
        end_date=TODAY + timedelta(days=2),
        status=TaskStatus.IN_PROGRESS,
        executor_user_id=executor.id,
    )
    assert run(TaskService.update_task(task_id, updates, creator.id)) is True

    task = run(TaskService.get_task(task_id))
    assert task.title == "Updated Title"
    assert task.status == TaskStatus.IN_PROGRESS
    assert task.end_date == TODAY + timedelta(days=2)
    assert len(task.members) == 2


def test_update_can_replace_executor(setup, make_user):
    creator, executor, event_id = setup
    replacement = make_user()
    task_id = _create(event_id, executor.id, creator.id)

    assert run(TaskService.update_task(task_id, TaskUpdate(executor_user_id=replacement.id), creator.id)) is True

    task = run(TaskService.get_task(task_id))
    executors = [m.user_id for m in task.members if m.role == TaskRole.EXECUTOR]
    assert executors == [replacement.id]
    assert run(TaskService.update_task_status(task_id, TaskStatusUpdate(status=TaskStatus.DONE), executor.id)) is False


def test_not_creator_cannot_update(setup, make_user):
    creator, executor, event_id = setup
    not_creator = make_user()
    task_id = _create(event_id, executor.id, creator.id, title="Not Updatable")

    updates = TaskUpdate(title="Should Not Update", status=TaskStatus.IN_PROGRESS)
    assert run(TaskService.update_task(task_id, updates, not_creator.id)) is False
    assert run(TaskService.update_task(task_id, updates, executor.id)) is False

    task = run(TaskService.get_task(task_id))
    assert task.title == "Not Updatable"
    assert task.status == TaskStatus.OPEN


def test_update_rejects_reversed_dates(setup):
    creator, executor, event_id = setup
    task_id = _create(event_id, executor.id, creator.id)

    updates = TaskUpdate(start_date=TODAY + timedelta(days=5))
    assert run(TaskService.update_task(task_id, updates, creator.id)) is False
    assert run(TaskService.get_task(task_id)).start_date == TODAY


def test_update_unknown_task_fails(setup):
    creator, _, _ = setup

    assert run(TaskService.update_task(999, TaskUpdate(title="x"), creator.id)) is False


def test_executor_can_update_status(setup):
    creator, executor, event_id = setup
    task_id = _create(event_id, executor.id, creator.id)

    assert run(TaskService.update_task_status(task_id, TaskStatusUpdate(status=TaskStatus.DONE), executor.id)) is True
    assert run(TaskService.get_task(task_id)).status == TaskStatus.DONE


def test_non_executor_cannot_update_status(setup, make_user):
    creator, executor, event_id = setup
    another = make_user()
    task_id = _create(event_id, executor.id, creator.id)

    status = TaskStatusUpdate(status=TaskStatus.DONE)
    assert run(TaskService.update_task_status(task_id, status, another.id)) is False
    assert run(TaskService.update_task_status(task_id, status, creator.id)) is False
    assert run(TaskService.get_task(task_id)).status == TaskStatus.OPEN


def test_creator_can_set_partner(setup, make_user):
    creator, executor, event_id = setup
    partner = make_user()
    second = make_user()
    task_id = _create(event_id, executor.id, creator.id)

    assert run(TaskService.set_partner(task_id, partner.id, creator.id)) is True
    assert run(TaskService.get_task(task_id)).partner_id == partner.id

    assert run(TaskService.set_partner(task_id, second.id, creator.id)) is True
    assert run(TaskService.get_task(task_id)).partner_id == second.id


def test_not_creator_cannot_set_partner(setup, make_user):
    creator, executor, event_id = setup
    partner = make_user()
    not_creator = make_user()
    task_id = _create(event_id, executor.id, creator.id)

    assert run(TaskService.set_partner(task_id, partner.id, not_creator.id)) is False
    assert run(TaskService.set_partner(task_id, partner.id, executor.id)) is False
    assert run(TaskService.get_task(task_id)).partner_id is None


def test_list_tasks_by_member_and_role(setup, make_user):
    creator, executor, event_id = setup
    other = make_user()
    first = _create(event_id, executor.id, creator.id, title="First")
    second = _create(event_id, other.id, creator.id, title="Second")

    mine = run(TaskService.list_tasks(TaskListQuery(user_id=executor.id, role=TaskRole.EXECUTOR)))
    assert [t.id for t in mine] == [first]

    created = run(TaskService.list_tasks(TaskListQuery(user_id=creator.id, role=TaskRole.CREATOR)))
    assert [t.id for t in created] == [first, second]

    assert run(TaskService.list_tasks(TaskListQuery(status=TaskStatus.DONE))) == []
