# create_tables.py
import logging

from config import settings
from database import Base, Database
# Import every model so it registers with Base
from modules.documents.models.document import Document  # noqa: F401
from modules.documents.models.approver import Approver  # noqa: F401
from modules.approvers.models.predefined_approver import PredefinedApprover  # noqa: F401

logger = logging.getLogger(__name__)


def create_tables(database: Database) -> None:
    """Creates every table known to the models."""
    logger.info("Tables to create: %s", list(Base.metadata.tables.keys()))
    database.create_tables()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    db = Database(settings.database_url).open()
    try:
        create_tables(db)
    finally:
        db.close()
