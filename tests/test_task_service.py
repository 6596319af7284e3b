from datetime import date, datetime

import pytest
from fastapi import HTTPException

from model.task_model import AssignedTask, Task
from Schema.task_schema import AssignedTaskItem, AssignTasksRequest, TaskUpsert
from service.task_service import Assignment, TaskService, merge_assignments
from utils.token import AuthUser


def as_auth(user):
    return AuthUser(id=user.id, role=user.role)


def assign(db_session, user, day="2025-06-02", items=None):
    items = items if items is not None else [
        AssignedTaskItem(company="Acme", task="Ship release"),
        AssignedTaskItem(company="Globex", task="Write report"),
    ]
    return TaskService(db_session).assign_tasks(
        AssignTasksRequest(employee_id=user.id, date=day, assigned_tasks=items)
    )


def test_merge_only_takes_is_done_from_the_payload():
    existing = [Assignment(1, "Acme", "Ship release", False), Assignment(2, "Globex", "Write report", False)]
    incoming = [
        AssignedTaskItem(id=1, company="Hacked Co", task="Do nothing", is_done=True),
        AssignedTaskItem(id=99, company="Ghost", task="Unknown", is_done=True),
        AssignedTaskItem(company="New", task="No id", is_done=True),
    ]

    merged = merge_assignments(existing, incoming)

    assert merged == [Assignment(1, "Acme", "Ship release", True), Assignment(2, "Globex", "Write report", False)]
    assert existing[0].is_done is False


def test_upsert_twice_keeps_one_row_with_latest_content(db_session, make_user):
    user = make_user("five@example.com", user_id=5)
    service = TaskService(db_session)

    service.upsert_task(as_auth(user), TaskUpsert(date="2025-06-01T00:00:00Z", content="first draft"))
    task, _ = service.upsert_task(as_auth(user), TaskUpsert(date="2025-06-01T00:00:00Z", content="final report"))

    rows = db_session.query(Task).filter(Task.user_id == 5).all()
    assert len(rows) == 1
    assert rows[0].date == date(2025, 6, 1)
    assert rows[0].content == "final report"
    assert task.id == rows[0].id


def test_upsert_buckets_by_utc_day(db_session, employee):
    service = TaskService(db_session)
    service.upsert_task(as_auth(employee), TaskUpsert(date="2025-06-01T08:00:00Z", content="morning"))
    service.upsert_task(as_auth(employee), TaskUpsert(date="2025-06-01T20:00:00-02:00", content="evening"))
    service.upsert_task(as_auth(employee), TaskUpsert(date="2025-06-01T23:00:00-02:00", content="after midnight UTC"))

    rows = db_session.query(Task).order_by(Task.date).all()
    assert [(row.date, row.content) for row in rows] == [
        (date(2025, 6, 1), "evening"),
        (date(2025, 6, 2), "after midnight UTC"),
    ]


def test_upsert_rejects_bad_dates(db_session, employee):
    with pytest.raises(HTTPException) as exc:
        TaskService(db_session).upsert_task(as_auth(employee), TaskUpsert(date="yesterday", content="x"))
    assert exc.value.status_code == 400


def test_manager_can_only_comment(db_session, employee, manager):
    service = TaskService(db_session)
    service.upsert_task(as_auth(employee), TaskUpsert(date="2025-06-02", content="did the work"))

    task, _ = service.upsert_task(
        as_auth(manager),
        TaskUpsert(date="2025-06-02", employee_id=employee.id, content="overwritten?", manager_comment="Nice"),
    )

    assert task.user_id == employee.id
    assert task.content == "did the work"
    assert task.manager_comment == "Nice"
    assert db_session.query(Task).count() == 1


def test_employee_cannot_set_manager_comment_or_write_for_others(db_session, employee, make_user):
    other = make_user("bob@example.com")
    task, _ = TaskService(db_session).upsert_task(
        as_auth(employee),
        TaskUpsert(date="2025-06-02", employee_id=other.id, content="mine", manager_comment="self praise"),
    )

    assert task.user_id == employee.id
    assert task.manager_comment is None


def test_employee_payload_only_flips_is_done(db_session, employee):
    stored = assign(db_session, employee)
    before = {(a.id, a.company_name, a.task_title, a.assigned_date, a.created_at) for a in stored}

    _, assignments = TaskService(db_session).upsert_task(
        as_auth(employee),
        TaskUpsert(
            date="2025-06-02",
            content="done",
            assigned_tasks=[
                AssignedTaskItem(id=stored[0].id, company="Changed", task="Changed", is_done=True),
                AssignedTaskItem(company="Sneaky", task="New item", is_done=True),
            ],
        ),
    )

    db_session.expire_all()
    rows = db_session.query(AssignedTask).order_by(AssignedTask.id).all()
    assert {(a.id, a.company_name, a.task_title, a.assigned_date, a.created_at) for a in rows} == before
    assert [row.is_done for row in rows] == [True, False]
    assert len(assignments) == 2


def test_assign_replaces_the_days_set_only(db_session, employee):
    assign(db_session, employee, day="2025-06-02")
    assign(db_session, employee, day="2025-06-03", items=[AssignedTaskItem(company="Initech", task="TPS")])

    result = assign(db_session, employee, day="2025-06-02", items=[AssignedTaskItem(company="Acme", task="Retro")])

    assert [(a.company, a.task) for a in result] == [("Acme", "Retro")]
    by_day = {}
    for row in db_session.query(AssignedTask).all():
        by_day.setdefault(row.assigned_date, []).append(row.task_title)
    assert by_day == {date(2025, 6, 2): ["Retro"], date(2025, 6, 3): ["TPS"]}


def test_assign_preserves_given_timestamp(db_session, employee):
    stamp = datetime(2025, 6, 2, 9, 15, 0)
    [row] = assign(db_session, employee, items=[AssignedTaskItem(company="Acme", task="Ship", assigned_at=stamp)])
    assert row.assigned_at == stamp


def test_assign_to_unknown_employee(db_session):
    with pytest.raises(HTTPException) as exc:
        TaskService(db_session).assign_tasks(AssignTasksRequest(employee_id=404, date="2025-06-02"))
    assert exc.value.status_code == 404


def test_task_endpoints(client, employee, employee_headers, manager_headers):
    response = client.post(
        "/tasks/assign",
        json={"employee_id": employee.id, "date": "2025-06-02T10:00:00Z",
              "assigned_tasks": [{"company": " Acme ", "task": " Ship release "}]},
        headers=manager_headers,
    )
    assert response.status_code == 200
    [item] = response.json()["assigned_tasks"]
    assert (item["company"], item["task"], item["is_done"]) == ("Acme", "Ship release", False)

    response = client.post(
        "/tasks",
        json={"date": "2025-06-02", "content": "<p>Shipped</p>",
              "assigned_tasks": [{"id": item["id"], "company": "x", "task": "y", "is_done": True}]},
        headers=employee_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["content"] == "<p>Shipped</p>"
    assert body["assigned_tasks"][0]["is_done"] is True
    assert body["assigned_tasks"][0]["company"] == "Acme"


def test_assign_endpoint_is_manager_only(client, employee, employee_headers):
    response = client.post(
        "/tasks/assign",
        json={"employee_id": employee.id, "date": "2025-06-02", "assigned_tasks": []},
        headers=employee_headers,
    )
    assert response.status_code == 403


def test_merge_ignores_items_without_a_done_flag():
    existing = [Assignment(1, "Acme", "Ship release", True), Assignment(2, "Globex", "Write report", False)]

    merged = merge_assignments(existing, [AssignedTaskItem(id=1), AssignedTaskItem(id=2, is_done=True)])

    assert [a.is_done for a in merged] == [True, True]


def test_saving_content_without_done_flags_keeps_ticked_items(db_session, employee):
    stored = assign(db_session, employee)
    service = TaskService(db_session)
    service.upsert_task(
        as_auth(employee),
        TaskUpsert(date="2025-06-02", content="first", assigned_tasks=[AssignedTaskItem(id=stored[0].id, is_done=True)]),
    )

    _, assignments = service.upsert_task(
        as_auth(employee),
        TaskUpsert(date="2025-06-02", content="second", assigned_tasks=[AssignedTaskItem(id=stored[0].id)]),
    )

    assert [a.is_done for a in assignments] == [True, False]


def test_assign_failure_keeps_the_previous_assignments(db_session, employee, monkeypatch):
    assign(db_session, employee)

    def broken_commit():
        raise RuntimeError("database went away")

    monkeypatch.setattr(db_session, "commit", broken_commit)
    with pytest.raises(RuntimeError):
        assign(db_session, employee, items=[AssignedTaskItem(company="Acme", task="Retro")])
    monkeypatch.undo()

    rows = db_session.query(AssignedTask).order_by(AssignedTask.id).all()
    assert [(row.company_name, row.task_title) for row in rows] == [("Acme", "Ship release"), ("Globex", "Write report")]


def test_upsert_updates_a_row_created_between_lookup_and_insert(db_session, employee, monkeypatch):
    db_session.add(Task(user_id=employee.id, date=date(2025, 6, 2), content="from another tab"))
    db_session.commit()

    real_find = TaskService._find_task
    lookups = []

    def stale_first_lookup(self, user_id, day):
        lookups.append(day)
        return None if len(lookups) == 1 else real_find(self, user_id, day)

    monkeypatch.setattr(TaskService, "_find_task", stale_first_lookup)
    task, _ = TaskService(db_session).upsert_task(as_auth(employee), TaskUpsert(date="2025-06-02", content="latest"))

    assert len(lookups) == 2
    rows = db_session.query(Task).all()
    assert [(row.date, row.content) for row in rows] == [(date(2025, 6, 2), "latest")]
    assert task.id == rows[0].id
