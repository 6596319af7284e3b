from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
from model.leave_model import LeaveStatus, LeaveType


def _upper(value):
    return value.upper() if isinstance(value, str) else value


class LeaveCreate(BaseModel):
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1, max_length=500)
    type: LeaveType = LeaveType.FULL
    start_time: Optional[str] = Field(None, max_length=5)
    end_time: Optional[str] = Field(None, max_length=5)

    @field_validator('type', mode='before')
    def normalize_type(cls, v):
        return _upper(v) or LeaveType.FULL


class LeaveUpdate(LeaveCreate):
    pass


class LeaveDecision(BaseModel):
    status: LeaveStatus
    manager_comment: Optional[str] = Field(None, max_length=500)

    @field_validator('status', mode='before')
    def normalize_status(cls, v):
        return _upper(v)


class LeaveSplitRequest(BaseModel):
    target_date: str
    new_type: LeaveType
    new_status: LeaveStatus
    comment: Optional[str] = Field(None, max_length=500)

    @field_validator('new_type', 'new_status', mode='before')
    def normalize_enums(cls, v):
        return _upper(v)


class LeaveUser(BaseModel):
    id: int
    name: Optional[str] = None
    email: str

    class Config:
        from_attributes = True


class LeaveResponse(BaseModel):
    id: int
    user_id: int
    start_date: date
    end_date: date
    type: LeaveType
    status: LeaveStatus
    reason: str
    days: int
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    manager_comment: Optional[str] = None
    is_edited: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeaveWithUserResponse(LeaveResponse):
    user: LeaveUser


class LeaveSplitResponse(BaseModel):
    message: str
    original_id: int
    segments: List[LeaveResponse]


class LeaveStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    wfh: int


class LeaveDashboardEntry(BaseModel):
    user: LeaveUser
    leaves: List[LeaveResponse]
