import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from modules.approvers.models.predefined_approver import PredefinedApprover
from modules.approvers.repositories.predefined_approver_repository import PredefinedApproverRepository
from modules.documents.exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_APPROVERS = [
    ("Alice Morgan", "alice.morgan@example.com", "Finance"),
    ("Brian Chen", "brian.chen@example.com", "Legal"),
    ("Carla Diaz", "carla.diaz@example.com", "Operations"),
    ("David Okafor", "david.okafor@example.com", "Human Resources"),
    ("Emma Larsen", "emma.larsen@example.com", "Compliance"),
]


class PredefinedApproverService:
    def __init__(self, repo: PredefinedApproverRepository):
        self.repo = repo

    def get_approvers(self, include_inactive: bool = False) -> List[PredefinedApprover]:
        try:
            return self.repo.find_all(include_inactive=include_inactive)
        except SQLAlchemyError as e:
            self.repo.db.rollback()
            raise StorageError(f"Could not load predefined approvers: {e}") from e

    def seed_defaults(self) -> int:
        """
        Inserts the default contact list when the table is empty.
        Returns how many rows were created.
        """
        if self.repo.count() > 0:
            logger.info("Predefined approvers already present")
            return 0

        approvers = [
            PredefinedApprover(name=name, email=email, department=department, active=True)
            for name, email, department in DEFAULT_APPROVERS
        ]
        self.repo.save_all(approvers)
        logger.info("Seeded %d predefined approvers", len(approvers))
        return len(approvers)
