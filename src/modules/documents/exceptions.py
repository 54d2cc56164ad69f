class WorkflowError(Exception):
    """Base class for errors raised by the approval workflow"""
    status_code = 500
    kind = "workflow_error"


class ValidationError(WorkflowError):
    """Bad or missing input: empty approver list, unknown vote action, invalid upload"""
    status_code = 400
    kind = "validation_error"


class NotFoundError(WorkflowError):
    status_code = 404
    kind = "not_found"


class ConflictError(WorkflowError):
    """A transition guard was violated (re-signing, voting twice, adding approvers twice)"""
    status_code = 409
    kind = "conflict"


class StorageError(WorkflowError):
    """The database failed underneath a transition"""
    kind = "storage_error"


class FileIOError(WorkflowError):
    """Reading, writing or mutating a stored file failed"""
    kind = "file_io_error"
