from datetime import datetime, timedelta
import logging
import secrets
from fastapi import HTTPException
from sqlalchemy.orm import Session
from model.otp_model import OTP
from model.usermodels import User
from utils.token import hash_password

logger = logging.getLogger(__name__)

OTP_TTL = timedelta(minutes=10)


def generate_code() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


class OTPService:
    def __init__(self, db: Session):
        self.db = db

    def _user_for(self, email: str) -> User:
        user = self.db.query(User).filter(User.email == email).first()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def issue(self, email: str) -> str:
        """Replace any outstanding code for `email` with a fresh one."""
        self._user_for(email)
        code = generate_code()
        try:
            self.db.query(OTP).filter(OTP.email == email).delete(synchronize_session=False)
            self.db.add(OTP(email=email, code=code, expires_at=datetime.utcnow() + OTP_TTL))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("OTP issued", extra={"email": email})
        return code

    def _valid_record(self, email: str, code: str) -> OTP:
        record = self.db.query(OTP).filter(
            OTP.email == email,
            OTP.code == code,
            OTP.expires_at > datetime.utcnow(),
        ).first()
        if not record:
            raise HTTPException(status_code=401, detail="Invalid or expired OTP")
        return record

    def verify(self, email: str, code: str) -> User:
        record = self._valid_record(email, code)
        user = self._user_for(email)
        try:
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return user

    def reset_password(self, email: str, code: str, new_password: str):
        record = self._valid_record(email, code)
        user = self._user_for(email)
        try:
            user.password = hash_password(new_password)
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Password reset", extra={"user_id": user.id})
