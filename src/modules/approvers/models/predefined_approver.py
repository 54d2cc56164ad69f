from sqlalchemy import Column, Integer, String, DateTime, Boolean
from datetime import datetime
from database import Base

class PredefinedApprover(Base):
    __tablename__ = 'predefined_approvers'

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    department = Column(String, nullable=False)
    active = Column(Boolean, default=True)
    created_date = Column(DateTime, default=datetime.utcnow)
