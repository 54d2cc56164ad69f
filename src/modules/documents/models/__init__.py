from .document import Document, DocumentStatus, TERMINAL_STATUSES
from .approver import Approver, ApprovalStatus, VoteAction

__all__ = ['Document', 'DocumentStatus', 'TERMINAL_STATUSES', 'Approver', 'ApprovalStatus', 'VoteAction']
