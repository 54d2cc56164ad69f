from datetime import datetime
from typing import Optional

from modules.documents.schemas import CamelModel


class PredefinedApproverResponse(CamelModel):
    id: int
    name: str
    email: str
    department: str
    active: bool
    created_date: Optional[datetime] = None
