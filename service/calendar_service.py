from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional
import logging
from fastapi import HTTPException
from sqlalchemy import and_
from sqlalchemy.orm import Session
from model.leave_model import Leave, LeaveStatus, LeaveType
from model.task_model import AssignedTask, Task, TaskStatus
from model.usermodels import Role, User
from utils.date_utils import day_key, month_bounds, to_utc_day

logger = logging.getLogger(__name__)

# Values a rich-text editor leaves behind when the user clears it
EMPTY_CONTENT_MARKERS = {"", "<p></p>", "<p><br></p>"}

WEEKEND = "W"
NO_SUBMISSION = "-"
ABSENT = "A"
LOCKED = ""

LEAVE_PREFIXES = {
    LeaveType.HALF: "HL",
    LeaveType.EARLY: "EL",
    LeaveType.LATE: "LL",
    LeaveType.WORK_FROM_HOME: "WFH",
}


@dataclass(frozen=True)
class DayStatus:
    date: date
    symbol: str
    is_weekend: bool = False
    locked: bool = False
    leave_id: Optional[int] = None
    task_id: Optional[int] = None


def is_weekend(day: date) -> bool:
    """Sundays, plus the last Saturday of the month."""
    weekday = day.weekday()
    if weekday == 6:
        return True
    if weekday == 5:
        return (day + timedelta(days=7)).month != day.month
    return False


def has_content(task) -> bool:
    if task is None:
        return False
    content = (task.content or "").strip()
    return content not in EMPTY_CONTENT_MARKERS


def task_done(task) -> bool:
    return has_content(task) and bool(task.is_completed)


def _tick(done: bool) -> str:
    return "T✓" if done else "T✗"


def find_leave(leaves: Iterable, key: str):
    for leave in leaves:
        start = day_key(to_utc_day(leave.start_date))
        end = day_key(to_utc_day(leave.end_date))
        if start <= key <= end:
            return leave
    return None


def leave_symbol(leave, task) -> str:
    if leave.type == LeaveType.FULL:
        return "FL"
    prefix = LEAVE_PREFIXES.get(leave.type)
    if prefix is None:
        return "L"
    return f"{prefix}/{_tick(task_done(task))}"


def task_symbol(task) -> str:
    if task is None:
        return NO_SUBMISSION
    if task.status == TaskStatus.ABSENT:
        return ABSENT
    if not has_content(task):
        return NO_SUBMISSION
    if task.status == TaskStatus.WFH:
        return f"WFH/{_tick(task_done(task))}"
    return _tick(task_done(task))


def classify_day(day: date, task=None, leave=None, end_date: Optional[date] = None) -> DayStatus:
    leave_id = leave.id if leave is not None else None
    task_id = task.id if task is not None else None
    weekend = is_weekend(day)

    if end_date is not None and day > end_date:
        return DayStatus(day, LOCKED, weekend, True, leave_id, task_id)
    if weekend:
        return DayStatus(day, WEEKEND, True, False, leave_id, task_id)
    if leave is not None:
        return DayStatus(day, leave_symbol(leave, task), False, False, leave_id, task_id)
    return DayStatus(day, task_symbol(task), False, False, leave_id, task_id)


def build_month_grid(
    year: int,
    month: int,
    leaves: Iterable = (),
    tasks: Iterable = (),
    end_date: Optional[date] = None,
) -> List[DayStatus]:
    """
    Classify every day of a month for one employee.

    Leaves are matched on their inclusive date range, tasks on their normalized
    day. Nothing passed in is modified.
    """
    first, last = month_bounds(year, month)
    leaves = list(leaves)
    tasks_by_day: Dict[str, object] = {}
    for task in tasks:
        tasks_by_day.setdefault(day_key(to_utc_day(task.date)), task)

    grid = []
    day = first
    while day <= last:
        key = day_key(day)
        grid.append(classify_day(day, tasks_by_day.get(key), find_leave(leaves, key), end_date))
        day += timedelta(days=1)
    return grid


def validate_month(year: int, month: int):
    """Reject a month/year pair that does not name a real calendar month."""
    try:
        month_bounds(year, month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def leave_days_in_grid(grid: Iterable[DayStatus], leave_id: int) -> int:
    return sum(1 for cell in grid if cell.leave_id == leave_id)


class CalendarAggregator:
    """Loads one month of leave and task data per employee and builds the status grid."""

    def __init__(self, db: Session):
        self.db = db

    def _leaves_for_month(self, user_id: int, first: date, last: date) -> List[Leave]:
        return self.db.query(Leave).filter(
            Leave.user_id == user_id,
            Leave.status == LeaveStatus.APPROVED,
            and_(Leave.start_date <= last, Leave.end_date >= first),
        ).order_by(Leave.start_date).all()

    def _tasks_for_month(self, user_id: int, first: date, last: date) -> List[Task]:
        return self.db.query(Task).filter(
            Task.user_id == user_id,
            Task.date >= first,
            Task.date <= last,
        ).order_by(Task.date).all()

    def _assignments_for_month(self, user_id: int, first: date, last: date) -> List[AssignedTask]:
        return self.db.query(AssignedTask).filter(
            AssignedTask.user_id == user_id,
            AssignedTask.assigned_date >= first,
            AssignedTask.assigned_date <= last,
        ).order_by(AssignedTask.assigned_date, AssignedTask.created_at).all()

    def employee_month(self, user: User, year: int, month: int) -> dict:
        first, last = month_bounds(year, month)
        leaves = self._leaves_for_month(user.id, first, last)
        tasks = self._tasks_for_month(user.id, first, last)

        return {
            "user": user,
            "leaves": leaves,
            "tasks": tasks,
            "assigned_tasks": self._assignments_for_month(user.id, first, last),
            "days": build_month_grid(year, month, leaves, tasks, user.end_date),
        }

    def month_view(self, year: int, month: int, user_id: Optional[int] = None) -> List[dict]:
        query = self.db.query(User)
        if user_id is not None:
            query = query.filter(User.id == user_id)
        else:
            query = query.filter(User.role == Role.EMPLOYEE)

        users = query.order_by(User.name).all()
        logger.info(f"Building work status for {len(users)} employees, {month}/{year}")
        return [self.employee_month(user, year, month) for user in users]
