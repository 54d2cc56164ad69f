# src/modules/documents/models/approver.py

from sqlalchemy import Column, Integer, ForeignKey, DateTime, String, Enum
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum
from database import Base

class ApprovalStatus(PyEnum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

class VoteAction(PyEnum):
    """Decision sent from an approval link."""
    APPROVE = "Approve"
    DISAPPROVE = "Disapprove"

    def to_status(self) -> ApprovalStatus:
        if self is VoteAction.APPROVE:
            return ApprovalStatus.APPROVED
        return ApprovalStatus.REJECTED

class Approver(Base):
    __tablename__ = "approvers"

    id = Column(Integer, primary_key=True)
    document_id = Column(Integer, ForeignKey("documents.id"), nullable=False, index=True)
    email       = Column(String(255), nullable=False)
    status      = Column(Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING)
    decided_at  = Column(DateTime, nullable=True)

    document = relationship("Document", back_populates="approvers")
