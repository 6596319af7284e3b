from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging
from db.database import get_db
from Schema.user_schema import (
    LoginRequest, OTPSendRequest, OTPVerifyRequest, PasswordResetRequest, TokenResponse, UserResponse,
)
from service.notification_service import LeaveNotifier, get_notifier
from service.otp_service import OTPService
from service.user_service import UserService
from utils.token import AuthUser, create_access_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = UserService(db).authenticate(payload.email, payload.password)
    logger.info(f"User {user.id} logged in")
    return {"token": create_access_token(user.id, user.role.value), "user": user}


@router.get("/me", response_model=UserResponse)
def me(auth_user: AuthUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserService(db).get_user(auth_user.id)


@router.post("/otp/send")
def send_otp(
    payload: OTPSendRequest,
    background_tasks: BackgroundTasks,
    notifier: LeaveNotifier = Depends(get_notifier),
    db: Session = Depends(get_db),
):
    try:
        code = OTPService(db).issue(payload.email)
    except HTTPException:
        raise
    except Exception:
        logger.exception("OTP send error")
        raise HTTPException(status_code=500, detail="Server error")

    background_tasks.add_task(notifier.send_otp, payload.email, code)
    return {"message": "OTP sent successfully"}


@router.post("/otp/verify", response_model=TokenResponse)
def verify_otp(payload: OTPVerifyRequest, db: Session = Depends(get_db)):
    try:
        user = OTPService(db).verify(payload.email, payload.otp)
    except HTTPException:
        raise
    except Exception:
        logger.exception("OTP verify error")
        raise HTTPException(status_code=500, detail="Server error")
    return {"token": create_access_token(user.id, user.role.value), "user": user}


@router.post("/reset-password")
def reset_password(payload: PasswordResetRequest, db: Session = Depends(get_db)):
    try:
        OTPService(db).reset_password(payload.email, payload.otp, payload.new_password)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Reset password error")
        raise HTTPException(status_code=500, detail="Server error")
    return {"message": "Password reset successful"}
