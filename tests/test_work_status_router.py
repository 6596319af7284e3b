from datetime import date

import pytest

from model.leave_model import LeaveType
from model.task_model import Task, TaskStatus


def add_task(db_session, user, day, content="Wrote tests", status=TaskStatus.PRESENT):
    db_session.add(Task(user_id=user.id, date=day, content=content, status=status))
    db_session.commit()


def test_work_status_grid(client, db_session, employee, make_user, make_leave, manager_headers):
    make_user("zoe@example.com", name="Zoe")
    make_leave(employee, date(2025, 6, 10), date(2025, 6, 15))
    make_leave(employee, date(2025, 6, 18), date(2025, 6, 18), type=LeaveType.HALF)
    add_task(db_session, employee, date(2025, 6, 2))
    add_task(db_session, employee, date(2025, 6, 3), content="<p><br></p>")
    add_task(db_session, employee, date(2025, 6, 4), content="", status=TaskStatus.ABSENT)
    add_task(db_session, employee, date(2025, 6, 18))

    response = client.get("/employee-work-status", params={"month": 6, "year": 2025}, headers=manager_headers)

    assert response.status_code == 200
    rows = response.json()
    assert [row["user"]["name"] for row in rows] == ["Alice", "Zoe"]
    alice = rows[0]
    symbols = {cell["date"]: cell["symbol"] for cell in alice["days"]}
    assert symbols["2025-06-02"] == "T✓"
    assert symbols["2025-06-03"] == "-"
    assert symbols["2025-06-04"] == "A"
    assert symbols["2025-06-10"] == "FL"
    assert symbols["2025-06-15"] == "W"
    assert symbols["2025-06-18"] == "HL/T✓"
    assert len(alice["leaves"]) == 2
    assert len(alice["tasks"]) == 4

    leave_id = alice["leaves"][0]["id"]
    assert sum(1 for cell in alice["days"] if cell["leave_id"] == leave_id) == alice["leaves"][0]["days"]

    zoe = rows[1]
    assert zoe["leaves"] == [] and zoe["tasks"] == []
    assert {cell["symbol"] for cell in zoe["days"]} == {"-", "W"}


def test_work_status_marks_days_after_offboarding(client, make_user, manager_headers):
    make_user("leaver@example.com", end_date=date(2025, 6, 20))

    [row] = client.get("/employee-work-status", params={"month": 6, "year": 2025}, headers=manager_headers).json()

    assert row["user"]["end_date"] == "2025-06-20"
    assert all(cell["locked"] for cell in row["days"][20:])


def test_work_status_access(client, employee_headers, manager_headers):
    assert client.get("/employee-work-status", params={"month": 6, "year": 2025}).status_code == 401
    assert client.get("/employee-work-status", params={"month": 6, "year": 2025},
                      headers=employee_headers).status_code == 403
    assert client.get("/employee-work-status", params={"month": 13, "year": 2025},
                      headers=manager_headers).status_code == 400


def test_tasks_view_is_own_for_employees(client, db_session, employee, make_user, employee_headers, manager_headers):
    bob = make_user("bob@example.com", name="Bob")
    add_task(db_session, bob, date(2025, 6, 2))

    [own] = client.get("/tasks", params={"month": 6, "year": 2025, "user_id": bob.id},
                       headers=employee_headers).json()
    assert own["user"]["id"] == employee.id
    assert own["tasks"] == []

    [bobs] = client.get("/tasks", params={"month": 6, "year": 2025, "user_id": bob.id},
                        headers=manager_headers).json()
    assert bobs["user"]["id"] == bob.id
    assert [task["date"] for task in bobs["tasks"]] == ["2025-06-02"]


@pytest.mark.parametrize("month, year", [(0, 2025), (13, 2025), (6, 0), (6, 10000)])
def test_out_of_range_month_or_year_is_rejected(client, employee, manager_headers, employee_headers, month, year):
    params = {"month": month, "year": year}

    work_status = client.get("/employee-work-status", params=params, headers=manager_headers)
    assert work_status.status_code == 400

    assert client.get("/tasks", params=params, headers=employee_headers).status_code == 400
    assert client.get("/tasks", params=params, headers=manager_headers).status_code == 400


@pytest.mark.parametrize("params", [{"month": 0, "year": 2025}, {"month": 6, "year": 0}, {"month": 6}])
def test_leave_month_filters_reject_bad_input(client, manager_headers, params):
    assert client.get("/leaves/stats", params=params, headers=manager_headers).status_code == 400
    assert client.get("/leave-dashboard", params=params, headers=manager_headers).status_code == 400
