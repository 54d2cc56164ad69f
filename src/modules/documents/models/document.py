from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum
from database import Base

class DocumentStatus(PyEnum):
    DRAFT = "Draft"
    SIGNED = "Signed"
    WAITING_FOR_APPROVAL = "WaitingForApproval"
    FINAL_APPROVED = "FinalApproved"
    REJECTED = "Rejected"

TERMINAL_STATUSES = (DocumentStatus.FINAL_APPROVED, DocumentStatus.REJECTED)

class Document(Base):
    __tablename__ = 'documents'

    id = Column(Integer, primary_key=True)
    case_id = Column(String(32), unique=True, nullable=False, index=True)
    original_filename = Column(String, nullable=False)
    file_key = Column(String, nullable=False)
    # bumped on every file replacement; signing only applies to the revision it stamped
    file_revision = Column(Integer, nullable=False, default=1)
    comment = Column(String, nullable=True)
    status = Column(Enum(DocumentStatus), nullable=False, default=DocumentStatus.DRAFT)
    upload_date = Column(DateTime, default=datetime.utcnow)
    signed_date = Column(DateTime, nullable=True)
    finalized_date = Column(DateTime, nullable=True)

    # Vote records, one batch per document
    approvers = relationship("Approver", back_populates="document", order_by="Approver.id", cascade="all, delete-orphan")
