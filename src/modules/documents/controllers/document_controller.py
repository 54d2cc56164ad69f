from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from modules.documents.dependencies import get_document_service
from modules.documents.schemas import (
    AddApproversRequest, AddApproversResponse, DocumentDetailResponse, DocumentListResponse,
    FinalizeResponse, NextCaseIdResponse, SignResponse, UploadResponse
)
from modules.documents.services.document_service import DocumentService

router = APIRouter(
    tags=["documents"]
)


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a PDF as a new Draft document"
)
async def upload_document(
    file: UploadFile = File(...),
    comment: Optional[str] = Form(None),
    service: DocumentService = Depends(get_document_service)
):
    contents = await file.read()
    return service.upload_document(contents, file.filename, file.content_type, comment)


@router.post(
    "/{document_id}/replace",
    response_model=UploadResponse,
    summary="Replace the file of a Draft document"
)
async def replace_document_file(
    document_id: int,
    file: UploadFile = File(...),
    comment: Optional[str] = Form(None),
    service: DocumentService = Depends(get_document_service)
):
    contents = await file.read()
    return service.replace_document_file(document_id, contents, file.filename, file.content_type, comment)


@router.post(
    "/{document_id}/sign",
    response_model=SignResponse,
    summary="Stamp every page and lock the document"
)
def sign_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    return service.sign_document(document_id)


@router.post(
    "/{document_id}/approvers",
    response_model=AddApproversResponse,
    summary="Add the approvers of a Signed document"
)
def add_approvers(
    document_id: int,
    payload: AddApproversRequest,
    service: DocumentService = Depends(get_document_service)
):
    return service.add_approvers(document_id, payload.approver_emails)


@router.post(
    "/{document_id}/finalize",
    response_model=FinalizeResponse,
    summary="Finalize a document whose approvers have all voted"
)
def finalize_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    return service.finalize_document(document_id)


@router.get(
    "",
    response_model=DocumentListResponse,
    summary="List documents with their vote counts"
)
def list_documents(service: DocumentService = Depends(get_document_service)):
    return service.list_documents()


@router.get(
    "/next-case-id",
    response_model=NextCaseIdResponse,
    summary="Preview the case id the next upload will get"
)
def next_case_id(service: DocumentService = Depends(get_document_service)):
    return service.next_case_id()


@router.get(
    "/{document_id}",
    response_model=DocumentDetailResponse,
    summary="Get a document with its approvers"
)
def get_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    return service.get_document(document_id)


@router.get("/{document_id}/download")
def download_document(
    document_id: int,
    service: DocumentService = Depends(get_document_service)
):
    """
    Devuelve el PDF tal como está guardado.
    """
    data, filename = service.read_document_file(document_id)
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'}
    )
