import logging
from sqlalchemy.orm import Session

from modules.documents.exceptions import FileIOError
from modules.documents.repositories.approver_repository import ApproverRepository
from modules.documents.repositories.document_repository import DocumentRepository
from modules.documents.services.document_state_service import unit_of_work
from modules.documents.storage import FileStorage

logger = logging.getLogger(__name__)

def reset_workflow_data(session: Session, storage: FileStorage) -> int:
    """
    Deletes every approver, every document and their stored files.
    Returns the number of documents deleted.
    """
    documents = DocumentRepository(session)
    approvers = ApproverRepository(session)

    with unit_of_work(session):
        file_keys = documents.all_file_keys()
        approvers.delete_all()
        deleted = documents.delete_all()
        session.commit()

    # rows are gone; a file that cannot be removed is only logged
    for key in file_keys:
        try:
            if storage.exists(key):
                storage.delete(key)
        except FileIOError as e:
            logger.warning("Error deleting %s: %s", key, e)

    logger.info("Workflow data reset: %d document(s) deleted", deleted)
    return deleted
