from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from db.database import get_db
from model.leave_model import Leave
from Schema.leave_schema import (
    LeaveCreate, LeaveDashboardEntry, LeaveDecision, LeaveResponse, LeaveSplitRequest,
    LeaveSplitResponse, LeaveStats, LeaveUpdate, LeaveWithUserResponse,
)
from service.leave_service import LeaveService, parse_leave_id
from service.leave_split_service import LeaveSplitService
from service.notification_service import LeaveNotifier, get_notifier
from utils.date_utils import to_utc_day
from utils.token import AuthUser, get_current_user, require_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Leaves"])


def _notify(background_tasks: BackgroundTasks, notifier: LeaveNotifier, mode: str, leave: Leave,
            summary: Optional[str] = None):
    snapshot = LeaveResponse.model_validate(leave).model_dump(mode="json")
    background_tasks.add_task(
        notifier.send_leave_notification,
        mode,
        snapshot,
        leave.user.name or "Unknown User",
        leave.user.email,
        summary,
    )


@router.post("/leaves", response_model=LeaveWithUserResponse, status_code=201)
def create_leave(
    payload: LeaveCreate,
    background_tasks: BackgroundTasks,
    auth_user: AuthUser = Depends(get_current_user),
    notifier: LeaveNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Submit a leave request for the signed-in user"""
    try:
        leave = LeaveService(db).create_leave(auth_user, payload)
        _notify(background_tasks, notifier, "NEW", leave)
        return leave
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to create leave", extra={"user_id": auth_user.id})
        raise HTTPException(status_code=500, detail="Failed to create leave")


@router.get("/leaves", response_model=List[LeaveWithUserResponse])
def get_all_leaves(
    auth_user: AuthUser = Depends(require_manager),
    db: Session = Depends(get_db),
):
    return LeaveService(db).list_all()


@router.get("/leaves/my-leaves", response_model=List[LeaveWithUserResponse])
def get_my_leaves(
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return LeaveService(db).list_for_user(auth_user.id)


@router.get("/leaves/stats", response_model=LeaveStats)
def get_leave_stats(
    month: Optional[int] = Query(None, description="Month (1-12)"),
    year: Optional[int] = Query(None),
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Leave counts; employees only see their own"""
    return LeaveService(db).stats(auth_user, month, year)


@router.put("/leaves/{leave_id}", response_model=LeaveWithUserResponse)
def edit_leave(
    leave_id: str,
    payload: LeaveUpdate,
    background_tasks: BackgroundTasks,
    auth_user: AuthUser = Depends(get_current_user),
    notifier: LeaveNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Edit an own pending leave while the edit window is open"""
    leave_pk = parse_leave_id(leave_id)
    try:
        leave = LeaveService(db).update_leave(auth_user, leave_pk, payload)
        summary = f"{leave.start_date.isoformat()} to {leave.end_date.isoformat()}, {leave.type.value}"
        _notify(background_tasks, notifier, "EDIT", leave, summary)
        return leave
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to edit leave", extra={"leave_id": leave_pk})
        raise HTTPException(status_code=500, detail="Failed to edit leave")


@router.patch("/leaves/{leave_id}", response_model=LeaveWithUserResponse)
def decide_leave(
    leave_id: str,
    decision: LeaveDecision,
    background_tasks: BackgroundTasks,
    auth_user: AuthUser = Depends(require_manager),
    notifier: LeaveNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Approve or reject a pending leave"""
    leave_pk = parse_leave_id(leave_id)
    try:
        leave = LeaveService(db).decide(leave_pk, decision)
        _notify(background_tasks, notifier, leave.status.value, leave)
        return leave
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to update leave status", extra={"leave_id": leave_pk})
        raise HTTPException(status_code=500, detail="Failed to update leave status")


@router.delete("/leaves/{leave_id}")
def delete_leave(
    leave_id: str,
    auth_user: AuthUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    leave_pk = parse_leave_id(leave_id)
    try:
        LeaveService(db).delete_leave(auth_user, leave_pk)
        return {"message": "Leave deleted successfully"}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to delete leave", extra={"leave_id": leave_pk})
        raise HTTPException(status_code=500, detail="Failed to delete leave")


@router.post("/leaves/{leave_id}/split", response_model=LeaveSplitResponse)
def split_leave(
    leave_id: str,
    payload: LeaveSplitRequest,
    background_tasks: BackgroundTasks,
    auth_user: AuthUser = Depends(require_manager),
    notifier: LeaveNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """
    Override the status of a single day inside a multi-day leave.

    The leave is replaced by up to three leaves: the days before the target,
    the target day itself with the new type and status, and the days after.
    """
    leave_pk = parse_leave_id(leave_id)
    try:
        segments = LeaveSplitService(db).split(leave_pk, payload)
        target_day = to_utc_day(payload.target_date)
        override = next(segment for segment in segments if segment.start_date == target_day)
        summary = f"{target_day.isoformat()} set to {override.type.value} ({override.status.value})"
        _notify(background_tasks, notifier, "SPLIT", override, summary)
        return {"message": "Status updated successfully", "original_id": leave_pk, "segments": segments}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to split leave", extra={"leave_id": leave_pk})
        raise HTTPException(status_code=500, detail="Failed to split leave")


@router.get("/leave-dashboard", response_model=List[LeaveDashboardEntry])
def get_leave_dashboard(
    month: Optional[int] = Query(None, description="Month (1-12)"),
    year: Optional[int] = Query(None),
    auth_user: AuthUser = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Approved leaves grouped by employee"""
    return LeaveService(db).dashboard(month, year)
