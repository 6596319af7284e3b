from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator
from model.usermodels import Role


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    role: Role
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: Role = Role.EMPLOYEE

    @field_validator('role', mode='before')
    def normalize_role(cls, v):
        return v.upper() if isinstance(v, str) else v


class UserUpdate(BaseModel):
    user_id: int
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Role] = None
    end_date: Optional[str] = None  # "" clears the offboarding date

    @field_validator('role', mode='before')
    def normalize_role(cls, v):
        return v.upper() if isinstance(v, str) else v


class OTPSendRequest(BaseModel):
    email: EmailStr


class OTPVerifyRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)


class PasswordResetRequest(OTPVerifyRequest):
    new_password: str = Field(..., min_length=8)
