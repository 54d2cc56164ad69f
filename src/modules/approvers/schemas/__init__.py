from .predefined_approver_schemas import PredefinedApproverResponse

__all__ = ['PredefinedApproverResponse']
