from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional
import logging
from fastapi import HTTPException
from sqlalchemy.orm import Session
from model.leave_model import Leave, LeaveStatus, LeaveType
from Schema.leave_schema import LeaveSplitRequest
from utils.date_utils import inclusive_days, to_utc_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveSegment:
    start_date: date
    end_date: date
    type: LeaveType
    status: LeaveStatus
    manager_comment: Optional[str]
    days: int
    is_override: bool = False


def plan_split(
    original,
    target: date,
    new_type: LeaveType,
    new_status: LeaveStatus,
    comment: Optional[str] = None,
) -> List[LeaveSegment]:
    """
    Decompose a leave around one overridden day.

    Returns the segments in date order: the untouched days before `target`
    (if any), the single overridden day, and the untouched days after it (if
    any). Raises ValueError when `target` lies outside the leave.
    """
    start = to_utc_day(original.start_date)
    end = to_utc_day(original.end_date)
    if not start <= target <= end:
        raise ValueError(
            f"Target date {target.isoformat()} is outside the leave range "
            f"{start.isoformat()} to {end.isoformat()}"
        )

    segments = []
    if target > start:
        before_end = target - timedelta(days=1)
        segments.append(LeaveSegment(
            start, before_end, original.type, original.status,
            original.manager_comment, inclusive_days(start, before_end),
        ))

    segments.append(LeaveSegment(target, target, new_type, new_status, comment, 1, True))

    if target < end:
        after_start = target + timedelta(days=1)
        segments.append(LeaveSegment(
            after_start, end, original.type, original.status,
            original.manager_comment, inclusive_days(after_start, end),
        ))
    return segments


class LeaveSplitService:
    def __init__(self, db: Session):
        self.db = db

    def split(self, leave_id: int, request: LeaveSplitRequest) -> List[Leave]:
        try:
            target = to_utc_day(request.target_date)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        original = self.db.query(Leave).filter(Leave.id == leave_id).first()
        if not original:
            raise HTTPException(status_code=404, detail="Leave not found")

        try:
            plan = plan_split(original, target, request.new_type, request.new_status, request.comment)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            created = []
            for segment in plan:
                leave = Leave(
                    user_id=original.user_id,
                    start_date=segment.start_date,
                    end_date=segment.end_date,
                    type=segment.type,
                    status=segment.status,
                    reason=original.reason,
                    days=segment.days,
                    start_time=original.start_time,
                    end_time=original.end_time,
                    manager_comment=segment.manager_comment,
                    is_edited=original.is_edited,
                    created_at=original.created_at,
                )
                self.db.add(leave)
                created.append(leave)

            self.db.flush()
            self.db.delete(original)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for leave in created:
            self.db.refresh(leave)

        logger.info(
            "Leave split",
            extra={
                "leave_id": leave_id,
                "target_date": target.isoformat(),
                "segment_ids": [leave.id for leave in created],
            },
        )
        return created
