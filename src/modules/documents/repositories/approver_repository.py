from datetime import datetime
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from modules.documents.models.approver import Approver, ApprovalStatus

class ApproverRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def get(self, approver_id: int) -> Optional[Approver]:
        return self.db.get(Approver, approver_id)

    def find_by_document_id(self, document_id: int) -> List[Approver]:
        return (
            self.db
            .query(Approver)
            .filter(Approver.document_id == document_id)
            .order_by(Approver.id)
            .all()
        )

    def statuses_for_document(self, document_id: int) -> List[ApprovalStatus]:
        rows = (
            self.db
            .query(Approver.status)
            .filter(Approver.document_id == document_id)
            .all()
        )
        return [row[0] for row in rows]

    def count_for_document(self, document_id: int) -> int:
        return self.db.query(Approver).filter(Approver.document_id == document_id).count()

    def add_batch(self, document_id: int, emails: List[str]) -> List[Approver]:
        approvers = [
            Approver(document_id=document_id, email=email, status=ApprovalStatus.PENDING)
            for email in emails
        ]
        self.db.add_all(approvers)
        self.db.flush()
        return approvers

    def record_decision(self, approver_id: int, decision: ApprovalStatus, decided_at: datetime) -> int:
        """Sets the vote only if the row is still Pending. Returns rows affected."""
        result = self.db.execute(
            update(Approver)
            .where(Approver.id == approver_id, Approver.status == ApprovalStatus.PENDING)
            .values(status=decision, decided_at=decided_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_all(self) -> int:
        return self.db.query(Approver).delete(synchronize_session=False)
