from fastapi import APIRouter, Depends

from modules.documents.dependencies import get_document_service
from modules.documents.schemas import ApprovalView, VoteRequest, VoteResponse
from modules.documents.services.document_service import DocumentService

router = APIRouter(
    tags=["approvals"]
)


@router.get(
    "/{approver_id}",
    response_model=ApprovalView,
    summary="Open an approval link"
)
def open_approval_link(
    approver_id: int,
    service: DocumentService = Depends(get_document_service)
):
    return service.get_approval(approver_id)


@router.post(
    "/{approver_id}",
    response_model=VoteResponse,
    summary="Record an approver's vote"
)
def record_vote(
    approver_id: int,
    payload: VoteRequest,
    service: DocumentService = Depends(get_document_service)
):
    """
    Registra el voto (Approve / Disapprove). El último voto pendiente
    finaliza el documento.
    """
    return service.record_vote(approver_id, payload.action, payload.document_id)
