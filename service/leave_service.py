from datetime import datetime
from typing import List, Optional
import logging
from fastapi import HTTPException
from sqlalchemy import and_
from sqlalchemy.orm import Session
from model.leave_model import Leave, LeaveStatus, LeaveType
from model.usermodels import Role
from Schema.leave_schema import LeaveCreate, LeaveDecision, LeaveUpdate
from utils.date_utils import edit_deadline, inclusive_days, month_bounds
from utils.token import AuthUser

logger = logging.getLogger(__name__)

TIMED_LEAVE_TYPES = {LeaveType.HALF, LeaveType.EARLY, LeaveType.LATE}


def parse_leave_id(raw: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid leave ID")


def validate_leave_request(payload: LeaveCreate) -> int:
    """Check a submitted or edited leave and return its inclusive day count."""
    if payload.end_date < payload.start_date:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")
    if payload.type in TIMED_LEAVE_TYPES and not payload.start_time:
        raise HTTPException(status_code=400, detail="Time is required for this leave type")
    if not payload.reason.strip():
        raise HTTPException(status_code=400, detail="Reason is required")
    return inclusive_days(payload.start_date, payload.end_date)


class LeaveService:
    def __init__(self, db: Session):
        self.db = db

    def get_leave(self, leave_id: int) -> Leave:
        leave = self.db.query(Leave).filter(Leave.id == leave_id).first()
        if not leave:
            raise HTTPException(status_code=404, detail="Leave not found")
        return leave

    def create_leave(self, auth_user: AuthUser, payload: LeaveCreate) -> Leave:
        days = validate_leave_request(payload)
        leave = Leave(
            user_id=auth_user.id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            reason=payload.reason.strip(),
            type=payload.type,
            days=days,
            start_time=payload.start_time or None,
            end_time=payload.end_time or None,
            status=LeaveStatus.PENDING,
        )
        try:
            self.db.add(leave)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(leave)
        logger.info("Leave submitted", extra={"leave_id": leave.id, "user_id": auth_user.id, "days": days})
        return leave

    def update_leave(self, auth_user: AuthUser, leave_id: int, payload: LeaveUpdate,
                     now: Optional[datetime] = None) -> Leave:
        leave = self.get_leave(leave_id)
        if leave.user_id != auth_user.id:
            raise HTTPException(status_code=403, detail="Access denied")
        if leave.status != LeaveStatus.PENDING:
            raise HTTPException(status_code=400, detail="Only pending leaves can be edited")

        now = now or datetime.utcnow()
        if now > edit_deadline(leave.created_at):
            raise HTTPException(status_code=400, detail="The edit window for this leave has closed")

        days = validate_leave_request(payload)
        try:
            leave.start_date = payload.start_date
            leave.end_date = payload.end_date
            leave.reason = payload.reason.strip()
            leave.type = payload.type
            leave.days = days
            leave.start_time = payload.start_time or None
            leave.end_time = payload.end_time or None
            leave.is_edited = True
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(leave)
        logger.info("Leave edited", extra={"leave_id": leave.id, "user_id": auth_user.id})
        return leave

    def decide(self, leave_id: int, decision: LeaveDecision) -> Leave:
        if decision.status not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            raise HTTPException(status_code=400, detail="Invalid status. Allowed: APPROVED, REJECTED")

        leave = self.get_leave(leave_id)
        if leave.status != LeaveStatus.PENDING:
            raise HTTPException(status_code=400, detail=f"Leave is already {leave.status.value}")

        try:
            leave.status = decision.status
            if decision.manager_comment is not None:
                leave.manager_comment = decision.manager_comment
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(leave)
        logger.info(
            "Leave status updated",
            extra={"leave_id": leave_id, "new_status": leave.status.value},
        )
        return leave

    def delete_leave(self, auth_user: AuthUser, leave_id: int):
        leave = self.get_leave(leave_id)
        if leave.user_id != auth_user.id:
            raise HTTPException(status_code=403, detail="Access denied")
        if leave.status != LeaveStatus.PENDING:
            raise HTTPException(status_code=400, detail="Can only delete pending leaves")
        try:
            self.db.delete(leave)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Leave deleted", extra={"leave_id": leave_id, "user_id": auth_user.id})

    def list_all(self) -> List[Leave]:
        return self.db.query(Leave).order_by(Leave.created_at.desc(), Leave.id.desc()).all()

    def list_for_user(self, user_id: int) -> List[Leave]:
        return self.db.query(Leave).filter(Leave.user_id == user_id).order_by(
            Leave.created_at.desc(), Leave.id.desc()
        ).all()

    def _month_filter(self, query, month: Optional[int], year: Optional[int]):
        if month is not None or year is not None:
            if month is None or year is None:
                raise HTTPException(status_code=400, detail="Both month and year are required")
            try:
                first, last = month_bounds(year, month)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            query = query.filter(and_(Leave.start_date <= last, Leave.end_date >= first))
        return query

    def stats(self, auth_user: AuthUser, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        query = self.db.query(Leave)
        if auth_user.role == Role.EMPLOYEE:
            query = query.filter(Leave.user_id == auth_user.id)
        query = self._month_filter(query, month, year)

        leave_query = query.filter(Leave.type != LeaveType.WORK_FROM_HOME)
        return {
            "total": leave_query.count(),
            "pending": leave_query.filter(Leave.status == LeaveStatus.PENDING).count(),
            "approved": leave_query.filter(Leave.status == LeaveStatus.APPROVED).count(),
            "rejected": leave_query.filter(Leave.status == LeaveStatus.REJECTED).count(),
            "wfh": query.filter(Leave.type == LeaveType.WORK_FROM_HOME).count(),
        }

    def dashboard(self, month: Optional[int] = None, year: Optional[int] = None) -> List[dict]:
        """Approved leaves grouped by employee."""
        query = self.db.query(Leave).filter(Leave.status == LeaveStatus.APPROVED)
        query = self._month_filter(query, month, year)

        grouped = {}
        for leave in query.order_by(Leave.start_date).all():
            entry = grouped.setdefault(leave.user_id, {"user": leave.user, "leaves": []})
            entry["leaves"].append(leave)
        return list(grouped.values())
