from datetime import date
from typing import List, Optional
from pydantic import BaseModel
from Schema.leave_schema import LeaveResponse
from Schema.task_schema import AssignedTaskResponse
from model.task_model import TaskStatus
from model.usermodels import Role


class WorkStatusUser(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    role: Role
    end_date: Optional[date] = None

    class Config:
        from_attributes = True


class WorkStatusTask(BaseModel):
    id: int
    date: date
    content: str
    status: TaskStatus
    is_completed: bool
    manager_comment: Optional[str] = None

    class Config:
        from_attributes = True


class DayStatusResponse(BaseModel):
    date: date
    symbol: str
    is_weekend: bool
    locked: bool
    leave_id: Optional[int] = None
    task_id: Optional[int] = None

    class Config:
        from_attributes = True


class EmployeeWorkStatus(BaseModel):
    user: WorkStatusUser
    leaves: List[LeaveResponse]
    tasks: List[WorkStatusTask]
    assigned_tasks: List[AssignedTaskResponse]
    days: List[DayStatusResponse]
