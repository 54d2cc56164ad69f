import logging
import re
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from modules.documents.exceptions import StorageError
from modules.documents.repositories.document_repository import DocumentRepository

logger = logging.getLogger(__name__)

CASE_ID_WIDTH = 6
CASE_ID_PATTERN = re.compile(r"^[0-9]{%d,}$" % CASE_ID_WIDTH)


def format_case_id(number: int) -> str:
    """Zero-pads to six digits; larger numbers keep all their digits."""
    return str(number).zfill(CASE_ID_WIDTH)


def next_case_id_from(case_ids: Iterable[str]) -> str:
    highest = max(
        (int(case_id) for case_id in case_ids if case_id and CASE_ID_PATTERN.match(case_id)),
        default=0,
    )
    return format_case_id(highest + 1)


class CaseIdAllocator:
    """
    Good-faith allocation of the next case id. The unique constraint on
    documents.case_id decides when two allocations collide.
    """

    def __init__(self, repository: DocumentRepository):
        self.repository = repository

    def next_case_id(self) -> str:
        try:
            case_ids = self.repository.all_case_ids()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read existing case ids: {e}") from e
        return next_case_id_from(case_ids)
