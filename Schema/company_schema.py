from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator('name')
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Company name is required")
        return v


class CompanyResponse(BaseModel):
    id: int
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
