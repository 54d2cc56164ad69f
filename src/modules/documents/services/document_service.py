import logging
import os
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import Settings, settings as default_settings
from modules.documents.exceptions import ConflictError, FileIOError, NotFoundError, StorageError, ValidationError
from modules.documents.models.approver import ApprovalStatus, VoteAction
from modules.documents.models.document import Document, DocumentStatus
from modules.documents.repositories.approver_repository import ApproverRepository
from modules.documents.repositories.document_repository import DocumentRepository
from modules.documents.schemas.document_schemas import (
    AddApproversResponse, ApprovalLink, ApprovalView, ApproverResponse, DocumentDetailResponse,
    DocumentListResponse, DocumentResponse, DocumentSummary, FinalizeResponse,
    NextCaseIdResponse, ResetResponse, SignResponse, UploadResponse, VoteResponse
)
from modules.documents.services.case_id import CaseIdAllocator
from modules.documents.services.cleanup import reset_workflow_data
from modules.documents.services.document_state_service import DocumentStateService, unit_of_work
from modules.documents.services.pdf_service import CorruptInputError, PdfService
from modules.documents.storage import FileStorage

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = ("application/pdf", "application/x-pdf")

class DocumentService:
    """
    Entry point for every workflow operation: validates the request, resolves
    the document, delegates transitions to DocumentStateService and shapes the
    response.
    """

    def __init__(self, db: Session, storage: FileStorage, pdf_service: PdfService,
                 settings: Settings = default_settings):
        self.db = db
        self.storage = storage
        self.pdf_service = pdf_service
        self.settings = settings
        self.documents = DocumentRepository(db)
        self.approvers = ApproverRepository(db)
        self.state = DocumentStateService(db, storage, pdf_service)
        self.case_ids = CaseIdAllocator(self.documents)

    # ---- upload ---- #
    def upload_document(
        self,
        file_contents: bytes,
        filename: str,
        content_type: Optional[str],
        comment: Optional[str] = None
    ) -> UploadResponse:
        """
        Valida el archivo, reserva un case id y guarda el documento en Draft.
        """
        # 1) Validaciones
        self._validate_file(file_contents, filename, content_type)

        # 2) Reserve the case id and store the file
        document = self._create_document(file_contents, filename, comment)

        return UploadResponse(
            message="Document uploaded",
            document_id=document.id,
            case_id=document.case_id
        )

    def replace_document_file(
        self,
        document_id: int,
        file_contents: bytes,
        filename: str,
        content_type: Optional[str],
        comment: Optional[str] = None
    ) -> UploadResponse:
        self._validate_file(file_contents, filename, content_type)
        document = self.state.replace_file(document_id, file_contents, filename, comment)
        return UploadResponse(
            message="Document file replaced",
            document_id=document.id,
            case_id=document.case_id
        )

    # ---- lifecycle ---- #
    def sign_document(self, document_id: int) -> SignResponse:
        _, location = self.state.sign(document_id)
        return SignResponse(message="Document signed and locked", file_location=location)

    def add_approvers(self, document_id: int, emails: List[str]) -> AddApproversResponse:
        approvers = self.state.add_approvers(document_id, self._normalize_emails(emails))
        return AddApproversResponse(
            message="Approvers added",
            approval_links=[
                ApprovalLink(email=approver.email, link=self._approval_link(approver.id))
                for approver in approvers
            ]
        )

    def record_vote(self, approver_id: int, action: str, document_id: Optional[int] = None) -> VoteResponse:
        try:
            vote = VoteAction(action)
        except ValueError:
            raise ValidationError(
                f"Invalid action {action!r}, expected 'Approve' or 'Disapprove'"
            )

        approver = self.state.record_vote(approver_id, vote.to_status(), document_id)
        with unit_of_work(self.db):
            document_status = self.documents.current_status(approver.document_id)
        return VoteResponse(
            message=f"Vote recorded: {approver.status.value}",
            approver_status=approver.status,
            document_status=document_status
        )

    def get_approval(self, approver_id: int) -> ApprovalView:
        """
        Landing data for a simulated approval link: who is asked to vote on
        which document, and which actions are still open to them.
        """
        with unit_of_work(self.db):
            approver = self.approvers.get(approver_id)
            if approver is None:
                raise NotFoundError("Approver not found")
            document = approver.document
            can_vote = (
                approver.status == ApprovalStatus.PENDING
                and document.status == DocumentStatus.WAITING_FOR_APPROVAL
            )
            return ApprovalView(
                approver_id=approver.id,
                email=approver.email,
                approver_status=approver.status,
                document_id=document.id,
                case_id=document.case_id,
                original_filename=document.original_filename,
                document_status=document.status,
                download_url=f"{self.settings.public_base_url}/documents/{document.id}/download",
                available_actions=[action.value for action in VoteAction] if can_vote else []
            )

    def finalize_document(self, document_id: int) -> FinalizeResponse:
        """Re-runs finalization, e.g. after a file error interrupted it."""
        document = self.state.get_document(document_id)
        outcome = self.state.finalize(document.id)
        self.db.refresh(document)
        if outcome is None:
            message = f"No change, document is {document.status.value}"
        else:
            message = f"Document finalized as {outcome.value}"
        return FinalizeResponse(message=message, status=document.status)

    # ---- queries ---- #
    def get_document(self, document_id: int) -> DocumentDetailResponse:
        with unit_of_work(self.db):
            document = self.state.get_document(document_id)
            approvers = self.approvers.find_by_document_id(document.id)
            return DocumentDetailResponse(
                **DocumentResponse.model_validate(document).model_dump(),
                approvers=[ApproverResponse.model_validate(a) for a in approvers],
                allowed_transitions=self.state.get_allowed_transitions(document)
            )

    def list_documents(self) -> DocumentListResponse:
        with unit_of_work(self.db):
            rows = self.documents.list_with_vote_counts()
        documents = [
            DocumentSummary(
                **DocumentResponse.model_validate(document).model_dump(),
                total_approvers=total or 0,
                approved_count=approved or 0,
                rejected_count=rejected or 0,
                pending_count=pending or 0
            )
            for document, total, approved, rejected, pending in rows
        ]
        return DocumentListResponse(documents=documents, total_count=len(documents))

    def next_case_id(self) -> NextCaseIdResponse:
        return NextCaseIdResponse(next_case_id=self.case_ids.next_case_id())

    def read_document_file(self, document_id: int) -> Tuple[bytes, str]:
        with unit_of_work(self.db):
            document = self.state.get_document(document_id)
        return self.storage.read(document.file_key), document.original_filename

    def reset(self) -> ResetResponse:
        deleted = reset_workflow_data(self.db, self.storage)
        return ResetResponse(message="Database and files cleared", documents_deleted=deleted)

    # ---- helpers ---- #
    def _create_document(self, file_contents: bytes, filename: str, comment: Optional[str]) -> Document:
        """
        Inserts the Draft row first so the unique case id is claimed before
        the file named after it is written.
        """
        for attempt in range(1, self.settings.case_id_retries + 1):
            case_id = self.case_ids.next_case_id()
            document = Document(
                case_id=case_id,
                original_filename=filename,
                file_key=f"{case_id}.pdf",
                file_revision=1,
                comment=comment,
                status=DocumentStatus.DRAFT,
                upload_date=datetime.utcnow()
            )
            try:
                self.documents.add(document)
            except IntegrityError:
                self.db.rollback()
                logger.warning("Case id %s already taken (attempt %d)", case_id, attempt)
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                raise StorageError(f"Could not create document: {e}") from e

            try:
                self.storage.save(document.file_key, file_contents)
            except FileIOError:
                self.db.rollback()
                raise

            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                try:
                    self.storage.delete(f"{case_id}.pdf")
                except FileIOError:
                    logger.exception("Could not remove %s.pdf after a failed commit", case_id)
                raise StorageError(f"Could not create document: {e}") from e

            logger.info("Document %s uploaded (%s, %d bytes)", case_id, filename, len(file_contents))
            return document

        raise ConflictError("Could not allocate a unique case id, please retry")

    def _validate_file(self, file_contents: bytes, filename: str, content_type: Optional[str]):
        """Valida el archivo subido"""

        if not filename:
            raise ValidationError("A file is required")

        # Validar MIME type
        if content_type not in PDF_CONTENT_TYPES:
            raise ValidationError("The file must be a PDF")

        # Validar extensión
        if os.path.splitext(filename)[1].lower() != ".pdf":
            raise ValidationError("The file extension must be .pdf")

        # Validar tamaño
        if not file_contents:
            raise ValidationError("The file is empty")
        if len(file_contents) > self.settings.max_file_size:
            raise ValidationError(
                f"The maximum file size is {self.settings.max_file_size // (1024 * 1024)} MB"
            )

        # Validar integridad del PDF
        try:
            self.pdf_service.page_count(file_contents)
        except CorruptInputError:
            raise ValidationError("Invalid or damaged PDF")

    @staticmethod
    def _normalize_emails(emails: List[str]) -> List[str]:
        cleaned = [str(email).strip() for email in emails or []]
        if not cleaned:
            raise ValidationError("At least one approver is required")
        if any(not email for email in cleaned):
            raise ValidationError("Approver email cannot be blank")
        lowered = [email.lower() for email in cleaned]
        if len(set(lowered)) != len(lowered):
            raise ValidationError("Each approver can only be added once")
        return cleaned

    def _approval_link(self, approver_id: int) -> str:
        return f"{self.settings.public_base_url}/approvals/{approver_id}"
