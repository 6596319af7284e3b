from datetime import datetime
from enum import Enum as pyEnum
from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from db.database import Base


class LeaveType(str, pyEnum):
    FULL = "FULL"
    HALF = "HALF"
    EARLY = "EARLY"
    LATE = "LATE"
    WORK_FROM_HOME = "WORK_FROM_HOME"

class LeaveStatus(str, pyEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Database Models
class Leave(Base):
    __tablename__ = "leaves"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    type = Column(Enum(LeaveType), nullable=False, default=LeaveType.FULL)
    status = Column(Enum(LeaveStatus), nullable=False, default=LeaveStatus.PENDING)
    reason = Column(String(500), nullable=False)
    days = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=True)  # HH:MM, HALF / EARLY / LATE only
    end_time = Column(String(5), nullable=True)
    manager_comment = Column(String(500), nullable=True)
    is_edited = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="leaves")
