from fastapi import APIRouter, Depends

from modules.documents.dependencies import get_document_service
from modules.documents.schemas import ResetResponse
from modules.documents.services.document_service import DocumentService

router = APIRouter(
    tags=["admin"]
)


@router.post(
    "/reset",
    response_model=ResetResponse,
    summary="Delete every document, approver and stored file"
)
def reset_database(service: DocumentService = Depends(get_document_service)):
    return service.reset()
