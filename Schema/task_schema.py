from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from model.task_model import TaskStatus


class AssignedTaskItem(BaseModel):
    """One to-do item as sent by the client; `id` is absent for new items."""
    id: Optional[int] = None
    company: str = ""
    task: str = ""
    is_done: Optional[bool] = None  # left out means unchanged
    assigned_at: Optional[datetime] = None


class TaskUpsert(BaseModel):
    date: str
    content: Optional[str] = None
    manager_comment: Optional[str] = None
    employee_id: Optional[int] = None
    assigned_tasks: Optional[List[AssignedTaskItem]] = None


class AssignTasksRequest(BaseModel):
    employee_id: int
    date: str
    assigned_tasks: List[AssignedTaskItem] = Field(default_factory=list)

    @field_validator('assigned_tasks')
    def strip_text(cls, items):
        for item in items:
            item.company = item.company.strip()
            item.task = item.task.strip()
        return items


class AssignedTaskResponse(BaseModel):
    id: int
    company: str
    task: str
    is_done: bool
    assigned_date: date
    assigned_at: datetime

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    id: int
    user_id: int
    date: date
    content: str
    status: TaskStatus
    is_completed: bool
    manager_comment: Optional[str] = None
    assigned_tasks: List[AssignedTaskResponse] = Field(default_factory=list)

    class Config:
        from_attributes = True


class AssignTasksResponse(BaseModel):
    assigned_tasks: List[AssignedTaskResponse]
