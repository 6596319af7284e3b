from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging
from db.database import get_db
from Schema.company_schema import CompanyCreate, CompanyResponse
from service.company_service import CompanyService
from utils.token import AuthUser, require_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=List[CompanyResponse])
def list_companies(db: Session = Depends(get_db)):
    return CompanyService(db).list_companies()


@router.post("", response_model=CompanyResponse)
def save_company(
    payload: CompanyCreate,
    auth_user: AuthUser = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Register a company name; saving an existing name returns the stored one"""
    try:
        return CompanyService(db).get_or_create(payload.name)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to save company", extra={"company_name": payload.name})
        raise HTTPException(status_code=500, detail="Failed to save company")
