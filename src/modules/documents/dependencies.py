from fastapi import Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from modules.documents.services.document_service import DocumentService
from modules.documents.services.pdf_service import PdfService
from modules.documents.storage import FileStorage


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_pdf_service(request: Request) -> PdfService:
    return request.app.state.pdf_service


def get_document_service(
    request: Request,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
    pdf_service: PdfService = Depends(get_pdf_service)
) -> DocumentService:
    return DocumentService(db, storage, pdf_service, settings=request.app.state.settings)
