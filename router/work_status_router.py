from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List
import logging
from db.database import get_db
from Schema.work_status_schema import EmployeeWorkStatus
from service.calendar_service import CalendarAggregator, validate_month
from utils.token import AuthUser, require_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Work Status"])


@router.get("/employee-work-status", response_model=List[EmployeeWorkStatus])
def get_employee_work_status(
    month: int = Query(..., description="Month (1-12)"),
    year: int = Query(..., description="Year"),
    auth_user: AuthUser = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Day-by-day status grid of every employee for one month"""
    validate_month(year, month)
    try:
        return CalendarAggregator(db).month_view(year, month)
    except Exception:
        logger.exception("Failed to fetch employee work status", extra={"month": month, "year": year})
        raise HTTPException(status_code=500, detail="Failed to fetch employee work status")
