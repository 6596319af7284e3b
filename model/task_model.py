from datetime import datetime
from enum import Enum as pyEnum
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from db.database import Base

class TaskStatus(str, pyEnum):
    PRESENT = "PRESENT"
    WFH = "WFH"
    ABSENT = "ABSENT"

class Task(Base):
    """Daily work log, one row per employee per calendar day."""
    __tablename__ = "tasks"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_tasks_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    content = Column(Text, nullable=False, default="")
    status = Column(Enum(TaskStatus), nullable=False, default=TaskStatus.PRESENT)
    is_completed = Column(Boolean, nullable=False, default=True)
    manager_comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="tasks")


class AssignedTask(Base):
    __tablename__ = "assigned_tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False, index=True)
    assigned_date = Column(Date, nullable=False, index=True)  # business day the item belongs to
    company_name = Column(String(255), nullable=False, default="")
    task_title = Column(String(500), nullable=False, default="")
    is_done = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="assigned_tasks")

    # client-facing names
    @property
    def company(self) -> str:
        return self.company_name

    @property
    def task(self) -> str:
        return self.task_title

    @property
    def assigned_at(self) -> datetime:
        return self.created_at
