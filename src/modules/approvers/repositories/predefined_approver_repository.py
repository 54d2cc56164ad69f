from typing import List
from sqlalchemy.orm import Session

from modules.approvers.models.predefined_approver import PredefinedApprover

class PredefinedApproverRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def find_all(self, include_inactive: bool = False) -> List[PredefinedApprover]:
        query = self.db.query(PredefinedApprover)
        if not include_inactive:
            query = query.filter(PredefinedApprover.active.is_(True))
        return query.order_by(PredefinedApprover.name).all()

    def count(self) -> int:
        return self.db.query(PredefinedApprover).count()

    def save_all(self, approvers: List[PredefinedApprover]) -> List[PredefinedApprover]:
        self.db.add_all(approvers)
        self.db.commit()
        return approvers
