from .cleanup import reset_workflow_data
from .document_service import DocumentService
from .document_state_service import DocumentStateService
from .pdf_service import PdfService

__all__ = ['reset_workflow_data', 'DocumentService', 'DocumentStateService', 'PdfService']
