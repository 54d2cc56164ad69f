import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from modules.documents.exceptions import (
    ConflictError, FileIOError, NotFoundError, StorageError, ValidationError, WorkflowError
)
from modules.documents.models.approver import Approver, ApprovalStatus
from modules.documents.models.document import Document, DocumentStatus, TERMINAL_STATUSES
from modules.documents.repositories.approver_repository import ApproverRepository
from modules.documents.repositories.document_repository import DocumentRepository
from modules.documents.services.pdf_service import PdfError, PdfService
from modules.documents.storage import FileStorage

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    DocumentStatus.DRAFT: (DocumentStatus.SIGNED,),
    DocumentStatus.SIGNED: (DocumentStatus.WAITING_FOR_APPROVAL,),
    DocumentStatus.WAITING_FOR_APPROVAL: (DocumentStatus.FINAL_APPROVED, DocumentStatus.REJECTED),
    DocumentStatus.FINAL_APPROVED: (),
    DocumentStatus.REJECTED: (),
}


@contextmanager
def unit_of_work(db: Session):
    """Rolls back on any failure; database errors surface as StorageError."""
    try:
        yield
    except WorkflowError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Database error: {e}") from e


def aggregate_votes(statuses: Iterable[ApprovalStatus]) -> Optional[DocumentStatus]:
    """
    Final outcome of a complete batch of votes, or None while the batch is
    incomplete. A single rejection decides the outcome, but only once every
    approver has voted.
    """
    statuses = list(statuses)
    if not statuses or ApprovalStatus.PENDING in statuses:
        return None
    if ApprovalStatus.REJECTED in statuses:
        return DocumentStatus.REJECTED
    return DocumentStatus.FINAL_APPROVED


class DocumentStateService:
    """
    Owns the document lifecycle Draft -> Signed -> WaitingForApproval ->
    FinalApproved | Rejected.

    Status changes are conditional updates (``WHERE status = <expected>``) so
    that two requests racing for the same transition cannot both win. A
    transition that mutates the file computes the new bytes first, then flips
    the status, then writes the file, then commits.
    """

    def __init__(self, db: Session, storage: FileStorage, pdf_service: PdfService):
        self.db = db
        self.storage = storage
        self.pdf_service = pdf_service
        self.documents = DocumentRepository(db)
        self.approvers = ApproverRepository(db)

    @staticmethod
    def can_change_state(document: Document, new_state: DocumentStatus) -> bool:
        return new_state in ALLOWED_TRANSITIONS.get(document.status, ())

    @staticmethod
    def get_allowed_transitions(document: Document) -> List[DocumentStatus]:
        """
        Returns list of states the document can transition to
        """
        return list(ALLOWED_TRANSITIONS.get(document.status, ()))

    # ---- transitions ---- #
    def replace_file(self, document_id: int, contents: bytes, filename: str,
                     comment: Optional[str] = None) -> Document:
        """
        Swaps the stored file of a Draft document. Case id and file key stay.
        """
        with unit_of_work(self.db):
            document = self.get_document(document_id)
            if document.status != DocumentStatus.DRAFT:
                raise ConflictError(
                    f"Document {document.case_id} is {document.status.value}; "
                    f"only Draft documents can be replaced"
                )
            revision = document.file_revision
            original = self._read_file(document.file_key)

            rows = self.documents.update_if_status(
                document.id, DocumentStatus.DRAFT, expected_revision=revision,
                original_filename=filename, comment=comment, file_revision=revision + 1,
            )
            if rows == 0:
                raise ConflictError(f"Document {document.case_id} changed while replacing its file")
            self._save_and_commit(document.file_key, contents, original)

        logger.info("Document %s: file replaced with %s", document.case_id, filename)
        self.db.refresh(document)
        return document

    def sign(self, document_id: int) -> Tuple[Document, str]:
        """
        Draft -> Signed: stamps every page and records the signing time.
        Returns the document and the location of the stamped file.
        """
        with unit_of_work(self.db):
            # 1) Load and check the guard
            document = self.get_document(document_id)
            if not self.can_change_state(document, DocumentStatus.SIGNED):
                raise ConflictError(
                    f"Document {document.case_id} is {document.status.value} and cannot be signed"
                )

            # 2) Build the stamped file before touching any row
            signed_at = datetime.utcnow()
            revision = document.file_revision
            original = self._read_file(document.file_key)
            stamped = self._mutate(self.pdf_service.stamp_signature, original, document.case_id, signed_at)

            # 3) Flip the status only if nobody signed or replaced the file in the meantime
            rows = self.documents.update_if_status(
                document.id, DocumentStatus.DRAFT, expected_revision=revision,
                status=DocumentStatus.SIGNED, signed_date=signed_at,
            )
            if rows == 0:
                raise ConflictError(
                    f"Document {document.case_id} was signed or its file replaced by another request"
                )

            # 4) File and status travel together
            location = self._save_and_commit(document.file_key, stamped, original)

        logger.info("Document %s signed", document.case_id)
        self.db.refresh(document)
        return document, location

    def add_approvers(self, document_id: int, emails: List[str]) -> List[Approver]:
        """
        Signed -> WaitingForApproval: inserts the whole batch of Pending
        approver rows in the same transaction as the status change.
        """
        if not emails:
            raise ValidationError("At least one approver is required")

        with unit_of_work(self.db):
            document = self.get_document(document_id)
            if not self.can_change_state(document, DocumentStatus.WAITING_FOR_APPROVAL):
                raise ConflictError(
                    f"Approvers can only be added to a Signed document; "
                    f"document {document.case_id} is {document.status.value}"
                )
            if self.approvers.count_for_document(document.id) > 0:
                raise ConflictError(f"Document {document.case_id} already has approvers")

            rows = self.documents.update_if_status(
                document.id, DocumentStatus.SIGNED,
                status=DocumentStatus.WAITING_FOR_APPROVAL,
            )
            if rows == 0:
                raise ConflictError(f"Approvers were added to document {document.case_id} by another request")
            approvers = self.approvers.add_batch(document.id, emails)
            self.db.commit()

        logger.info("Document %s: %d approver(s) added, waiting for approval", document.case_id, len(approvers))
        return approvers

    def record_vote(self, approver_id: int, decision: ApprovalStatus,
                    document_id: Optional[int] = None) -> Approver:
        """
        Records one approver's decision, then tries to finalize the document.
        """
        if decision not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
            raise ValidationError(f"Invalid decision: {decision}")

        with unit_of_work(self.db):
            approver = self.approvers.get(approver_id)
            if approver is None or (document_id is not None and approver.document_id != document_id):
                raise NotFoundError("Approver not found")
            if approver.status != ApprovalStatus.PENDING:
                raise ConflictError(f"Approver {approver.email} already voted ({approver.status.value})")
            if approver.document.status != DocumentStatus.WAITING_FOR_APPROVAL:
                raise ConflictError(f"Document is {approver.document.status.value}; voting is closed")

            rows = self.approvers.record_decision(approver.id, decision, datetime.utcnow())
            if rows == 0:
                raise ConflictError(f"Approver {approver.email} already voted")
            self.db.commit()

        logger.info("Approver %s voted %s on document %s", approver.id, decision.value, approver.document_id)
        self.finalize(approver.document_id)
        self.db.refresh(approver)
        return approver

    def finalize(self, document_id: int) -> Optional[DocumentStatus]:
        """
        Computes and persists the final outcome once every approver voted.

        Safe to call any number of times, concurrently included: only the call
        whose conditional update moves the row out of WaitingForApproval
        writes the outcome page. Returns the outcome it persisted, or None.
        """
        with unit_of_work(self.db):
            statuses = self.approvers.statuses_for_document(document_id)
            outcome = aggregate_votes(statuses)
            if outcome is None:
                logger.info(
                    "Document %s: waiting for %d more vote(s)",
                    document_id, statuses.count(ApprovalStatus.PENDING)
                )
                return None

            document = self.get_document(document_id)
            if document.status in TERMINAL_STATUSES:
                logger.info("Document %s already finalized as %s", document.case_id, document.status.value)
                return None
            if document.status != DocumentStatus.WAITING_FOR_APPROVAL:
                return None

            decided_at = datetime.utcnow()
            original = self._read_file(document.file_key)
            mutated = self._mutate(self.pdf_service.append_final_outcome_page, original, outcome, decided_at)

            rows = self.documents.update_if_status(
                document.id, DocumentStatus.WAITING_FOR_APPROVAL,
                status=outcome, finalized_date=decided_at,
            )
            if rows == 0:
                self.db.rollback()
                logger.info("Document %s was finalized by a concurrent vote", document.case_id)
                return None

            self._save_and_commit(document.file_key, mutated, original)

        logger.info("Document %s finalized: %s", document.case_id, outcome.value)
        return outcome

    # ---- helpers ---- #
    def get_document(self, document_id: int) -> Document:
        document = self.documents.get(document_id)
        if document is None:
            raise NotFoundError("Document not found")
        return document

    def _read_file(self, key: str) -> bytes:
        return self.storage.read(key)

    @staticmethod
    def _mutate(operation, *args) -> bytes:
        try:
            return operation(*args)
        except PdfError as e:
            raise FileIOError(f"Could not update the PDF: {e}") from e

    def _save_and_commit(self, key: str, data: bytes, original: bytes) -> str:
        """
        Writes the new file, then commits the pending row changes. If the
        commit fails the previous file content is put back.
        """
        location = self.storage.save(key, data)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            try:
                self.storage.save(key, original)
            except FileIOError:
                logger.exception("Could not restore %s after a failed commit", key)
            raise
        return location
