from typing import List, Optional
from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from modules.documents.models.document import Document, DocumentStatus
from modules.documents.models.approver import Approver, ApprovalStatus

class DocumentRepository:
    """
    Document rows. Writes are flushed, never committed: the calling service
    owns the transaction.
    """

    def __init__(self, db_session: Session):
        self.db = db_session

    def get(self, document_id: int) -> Optional[Document]:
        return self.db.get(Document, document_id)

    def add(self, document: Document) -> Document:
        self.db.add(document)
        self.db.flush()
        return document

    def all_case_ids(self) -> List[str]:
        return [row[0] for row in self.db.query(Document.case_id).all()]

    def all_file_keys(self) -> List[str]:
        return [row[0] for row in self.db.query(Document.file_key).all()]

    def current_status(self, document_id: int) -> Optional[DocumentStatus]:
        return (
            self.db
            .query(Document.status)
            .filter(Document.id == document_id)
            .scalar()
        )

    def update_if_status(self, document_id: int, expected_status: DocumentStatus,
                         expected_revision: Optional[int] = None, **values) -> int:
        """
        Conditional update: applies ``values`` only while the row is still in
        ``expected_status`` (and, when given, still at ``expected_revision``).
        Returns the number of rows affected (0 or 1).
        """
        stmt = update(Document).where(Document.id == document_id, Document.status == expected_status)
        if expected_revision is not None:
            stmt = stmt.where(Document.file_revision == expected_revision)
        result = self.db.execute(
            stmt
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def list_with_vote_counts(self) -> list:
        """Every document with the tally of its approver rows, newest upload first."""
        return (
            self.db
            .query(
                Document,
                func.count(Approver.id).label("total_approvers"),
                func.sum(case((Approver.status == ApprovalStatus.APPROVED, 1), else_=0)).label("approved_count"),
                func.sum(case((Approver.status == ApprovalStatus.REJECTED, 1), else_=0)).label("rejected_count"),
                func.sum(case((Approver.status == ApprovalStatus.PENDING, 1), else_=0)).label("pending_count"),
            )
            .outerjoin(Approver, Approver.document_id == Document.id)
            .group_by(Document.id)
            .order_by(Document.upload_date.desc(), Document.id.desc())
            .all()
        )

    def delete_all(self) -> int:
        return self.db.query(Document).delete(synchronize_session=False)
