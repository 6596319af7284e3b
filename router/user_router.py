from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging
from db.database import get_db
from Schema.user_schema import UserCreate, UserResponse, UserUpdate
from service.notification_service import LeaveNotifier, get_notifier
from service.user_service import UserService
from utils.token import AuthUser, require_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/manage", response_model=List[UserResponse])
def list_users(auth_user: AuthUser = Depends(require_manager), db: Session = Depends(get_db)):
    return UserService(db).list_users()


@router.post("/manage", response_model=UserResponse, status_code=201)
def create_user(
    payload: UserCreate,
    background_tasks: BackgroundTasks,
    auth_user: AuthUser = Depends(require_manager),
    notifier: LeaveNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Create an account and mail the temporary password to the new user"""
    try:
        user, temp_password = UserService(db).create_user(payload)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to create user")
        raise HTTPException(status_code=500, detail="Failed to create user")

    background_tasks.add_task(notifier.send_welcome, user.email, user.name, temp_password)
    return user


@router.patch("/manage", response_model=UserResponse)
def update_user(
    payload: UserUpdate,
    auth_user: AuthUser = Depends(require_manager),
    db: Session = Depends(get_db),
):
    """Rename, change the role of, or set the offboarding date of a user"""
    try:
        return UserService(db).update_user(payload)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Failed to update user", extra={"user_id": payload.user_id})
        raise HTTPException(status_code=500, detail="Failed to update user")
