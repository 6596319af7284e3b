from datetime import date
from typing import List, Optional, Tuple
import logging
import secrets
import string
from fastapi import HTTPException
from sqlalchemy.orm import Session
from model.usermodels import User
from Schema.user_schema import UserCreate, UserUpdate
from utils.date_utils import to_utc_day
from utils.token import hash_password, verify_password

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%"


def generate_password(length: int = 12) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def authenticate(self, email: str, password: str) -> User:
        user = self.get_by_email(email)
        if not user or not verify_password(password, user.password):
            raise HTTPException(status_code=401, detail="Invalid email or password")
        return user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.name).all()

    def create_user(self, payload: UserCreate) -> Tuple[User, str]:
        """Create an account with a generated temporary password."""
        if self.get_by_email(payload.email):
            raise HTTPException(status_code=400, detail="User already exists")

        temp_password = generate_password()
        user = User(
            name=payload.name.strip(),
            email=payload.email,
            password=hash_password(temp_password),
            role=payload.role,
        )
        try:
            self.db.add(user)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user, temp_password

    def update_user(self, payload: UserUpdate) -> User:
        user = self.get_user(payload.user_id)

        end_date: Optional[date] = user.end_date
        if payload.end_date is not None:
            if payload.end_date.strip() == "":
                end_date = None
            else:
                try:
                    end_date = to_utc_day(payload.end_date)
                except ValueError as e:
                    raise HTTPException(status_code=400, detail=str(e))

        try:
            if payload.name is not None:
                user.name = payload.name.strip()
            if payload.role is not None:
                user.role = payload.role
            user.end_date = end_date
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        logger.info("User updated", extra={"user_id": user.id})
        return user
