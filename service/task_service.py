from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple
import logging
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from model.task_model import AssignedTask, Task, TaskStatus
from model.usermodels import Role, User
from Schema.task_schema import AssignedTaskItem, AssignTasksRequest, TaskUpsert
from utils.date_utils import naive_utc, to_utc_day
from utils.token import AuthUser

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Assignment:
    id: int
    company: str
    task: str
    is_done: bool


def merge_assignments(existing: Iterable[Assignment], incoming: Iterable[AssignedTaskItem]) -> List[Assignment]:
    """
    Apply an employee's assigned-task payload to the stored assignments.

    Only `is_done` is taken from the payload, matched by id, and only when
    the item carries one. Everything else comes from the stored record, and
    ids that are not stored are ignored.
    """
    flags: Dict[int, bool] = {
        item.id: item.is_done for item in incoming if item.id is not None and item.is_done is not None
    }
    return [
        replace(assignment, is_done=flags[assignment.id]) if assignment.id in flags else assignment
        for assignment in existing
    ]


def parse_day(value: str) -> date:
    try:
        return to_utc_day(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class TaskService:
    def __init__(self, db: Session):
        self.db = db

    def assignments_for_day(self, user_id: int, day: date) -> List[AssignedTask]:
        return self.db.query(AssignedTask).filter(
            AssignedTask.user_id == user_id,
            AssignedTask.assigned_date == day,
        ).order_by(AssignedTask.created_at, AssignedTask.id).all()

    def _require_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail="Employee not found")
        return user

    def _find_task(self, user_id: int, day: date) -> Optional[Task]:
        return self.db.query(Task).filter(Task.user_id == user_id, Task.date == day).first()

    def _apply_done_flags(self, user_id: int, day: date, items: List[AssignedTaskItem]):
        rows = self.assignments_for_day(user_id, day)
        merged = merge_assignments(
            [Assignment(row.id, row.company_name, row.task_title, row.is_done) for row in rows],
            items,
        )
        for row, assignment in zip(rows, merged):
            row.is_done = assignment.is_done

    def _write(self, task: Task, updates: dict, assigned_items: Optional[List[AssignedTaskItem]]):
        for key, value in updates.items():
            setattr(task, key, value)
        if assigned_items:
            self._apply_done_flags(task.user_id, task.date, assigned_items)

    def upsert_task(self, auth_user: AuthUser, payload: TaskUpsert) -> Tuple[Task, List[AssignedTask]]:
        day = parse_day(payload.date)

        is_manager_action = auth_user.role == Role.MANAGER and payload.employee_id is not None
        target_user_id = payload.employee_id if is_manager_action else auth_user.id
        if is_manager_action:
            self._require_user(target_user_id)

        # Managers only comment, employees only write their own log
        updates = {}
        if is_manager_action:
            if payload.manager_comment is not None:
                updates["manager_comment"] = payload.manager_comment
        elif payload.content is not None:
            updates["content"] = payload.content

        try:
            task = self._find_task(target_user_id, day)
            if task is None:
                task = Task(
                    user_id=target_user_id,
                    date=day,
                    content=updates.get("content", ""),
                    manager_comment=updates.get("manager_comment"),
                    status=TaskStatus.PRESENT,
                    is_completed=True,
                )
                self.db.add(task)
                self.db.flush()
            self._write(task, updates, None if is_manager_action else payload.assigned_tasks)
            self.db.commit()
        except IntegrityError:
            # another request created the row first; update it instead
            self.db.rollback()
            task = self._find_task(target_user_id, day)
            if task is None:
                raise
            try:
                self._write(task, updates, None if is_manager_action else payload.assigned_tasks)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(task)
        logger.info(
            "Task saved",
            extra={"user_id": target_user_id, "date": day.isoformat(), "manager_action": is_manager_action},
        )
        return task, self.assignments_for_day(target_user_id, day)

    def assign_tasks(self, payload: AssignTasksRequest) -> List[AssignedTask]:
        day = parse_day(payload.date)
        self._require_user(payload.employee_id)

        try:
            self.db.query(AssignedTask).filter(
                AssignedTask.user_id == payload.employee_id,
                AssignedTask.assigned_date == day,
            ).delete(synchronize_session=False)

            for item in payload.assigned_tasks:
                self.db.add(AssignedTask(
                    user_id=payload.employee_id,
                    assigned_date=day,
                    company_name=item.company,
                    task_title=item.task,
                    is_done=bool(item.is_done),
                    created_at=naive_utc(item.assigned_at) if item.assigned_at else datetime.utcnow(),
                ))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Assignments replaced",
            extra={"user_id": payload.employee_id, "date": day.isoformat(), "count": len(payload.assigned_tasks)},
        )
        return self.assignments_for_day(payload.employee_id, day)
