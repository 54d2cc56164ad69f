from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from modules.approvers.repositories.predefined_approver_repository import PredefinedApproverRepository
from modules.approvers.schemas import PredefinedApproverResponse
from modules.approvers.services.predefined_approver_service import PredefinedApproverService

router = APIRouter()


def get_predefined_approver_service(db: Session = Depends(get_db)) -> PredefinedApproverService:
    repo = PredefinedApproverRepository(db)
    return PredefinedApproverService(repo)


@router.get(
    "/predefined",
    response_model=List[PredefinedApproverResponse],
    summary="List the predefined approver contacts"
)
def list_predefined_approvers(
    include_inactive: bool = False,
    service: PredefinedApproverService = Depends(get_predefined_approver_service)
):
    return service.get_approvers(include_inactive=include_inactive)
