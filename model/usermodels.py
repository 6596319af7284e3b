from datetime import datetime
from enum import Enum as pyEnum
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum
from db.database import Base
from sqlalchemy.orm import relationship

class Role(str, pyEnum):
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(100), nullable=False)
    role = Column(Enum(Role), nullable=False, default=Role.EMPLOYEE)
    end_date = Column(Date, nullable=True)  # offboarding date
    created_at = Column(DateTime, default=datetime.utcnow)

    leaves = relationship("Leave", back_populates="user", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="user", cascade="all, delete-orphan")
    assigned_tasks = relationship("AssignedTask", back_populates="user", cascade="all, delete-orphan")
