from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime
import logging
from db.database import get_db
from model.usermodels import Role
from Schema.task_schema import (
    AssignedTaskResponse, AssignTasksRequest, AssignTasksResponse, TaskResponse, TaskUpsert,
)
from Schema.work_status_schema import EmployeeWorkStatus
from service.calendar_service import CalendarAggregator, validate_month
from service.task_service import TaskService
from utils.token import AuthUser, get_current_user, require_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.post("", response_model=TaskResponse)
def save_task(
    payload: TaskUpsert,
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create or update the daily log for one day.

    Employees write their own log and tick off assigned items; a manager
    passing `employee_id` can only leave a comment on that employee's day.
    """
    try:
        task, assignments = TaskService(db).upsert_task(auth_user, payload)
        response = TaskResponse.model_validate(task)
        response.assigned_tasks = [AssignedTaskResponse.model_validate(a) for a in assignments]
        return response
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to save task", extra={"user_id": auth_user.id})
        raise HTTPException(status_code=500, detail="Failed to save task")


@router.get("", response_model=List[EmployeeWorkStatus])
def get_tasks(
    month: Optional[int] = Query(None, description="Month (1-12), default: current month"),
    year: Optional[int] = Query(None, description="Year, default: current year"),
    user_id: Optional[int] = Query(None, description="Employee to view (managers only)"),
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Month view of one employee: the caller, or any employee for managers"""
    today = datetime.utcnow()
    if month is None:
        month = today.month
    if year is None:
        year = today.year
    validate_month(year, month)

    target_id = user_id if auth_user.role == Role.MANAGER and user_id is not None else auth_user.id
    try:
        result = CalendarAggregator(db).month_view(year, month, user_id=target_id)
    except Exception:
        logger.exception("Failed to load tasks", extra={"user_id": target_id})
        raise HTTPException(status_code=500, detail="Failed to load tasks")
    if not result:
        raise HTTPException(status_code=404, detail="User not found")
    return result


@router.post("/assign", response_model=AssignTasksResponse)
def assign_tasks(
    payload: AssignTasksRequest,
    auth_user: AuthUser = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Replace the assigned to-do items of one employee for one day"""
    try:
        return {"assigned_tasks": TaskService(db).assign_tasks(payload)}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to assign tasks", extra={"user_id": payload.employee_id})
        raise HTTPException(status_code=500, detail="Failed to synchronize tasks")
