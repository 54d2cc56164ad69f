from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr
from pydantic.alias_generators import to_camel

from modules.documents.models.approver import ApprovalStatus
from modules.documents.models.document import DocumentStatus


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire"""
    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


class UploadResponse(CamelModel):
    message: str
    document_id: int
    case_id: str


class SignResponse(CamelModel):
    message: str
    file_location: str


class AddApproversRequest(CamelModel):
    approver_emails: List[EmailStr]


class ApprovalLink(CamelModel):
    email: str
    link: str


class AddApproversResponse(CamelModel):
    message: str
    approval_links: List[ApprovalLink]


class VoteRequest(CamelModel):
    action: str
    document_id: Optional[int] = None


class ApprovalView(CamelModel):
    """What an approver sees when opening their link"""
    approver_id: int
    email: str
    approver_status: ApprovalStatus
    document_id: int
    case_id: str
    original_filename: str
    document_status: DocumentStatus
    download_url: str
    available_actions: List[str]


class VoteResponse(CamelModel):
    message: str
    approver_status: ApprovalStatus
    document_status: DocumentStatus


class FinalizeResponse(CamelModel):
    message: str
    status: DocumentStatus


class ApproverResponse(CamelModel):
    id: int
    email: str
    status: ApprovalStatus
    decided_at: Optional[datetime] = None


class DocumentResponse(CamelModel):
    id: int
    case_id: str
    original_filename: str
    file_key: str
    file_revision: int = 1
    comment: Optional[str] = None
    status: DocumentStatus
    upload_date: datetime
    signed_date: Optional[datetime] = None
    finalized_date: Optional[datetime] = None


class DocumentDetailResponse(DocumentResponse):
    approvers: List[ApproverResponse]
    allowed_transitions: List[DocumentStatus]


class DocumentSummary(DocumentResponse):
    total_approvers: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    pending_count: int = 0


class DocumentListResponse(CamelModel):
    documents: List[DocumentSummary]
    total_count: int


class NextCaseIdResponse(CamelModel):
    next_case_id: str


class ResetResponse(CamelModel):
    message: str
    documents_deleted: int
