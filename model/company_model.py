from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String
from db.database import Base


class Company(Base):
    """Client companies that assigned tasks are filed under."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
