from .document_schemas import (
    CamelModel, UploadResponse, SignResponse, AddApproversRequest, ApprovalLink,
    AddApproversResponse, ApprovalView, VoteRequest, VoteResponse, FinalizeResponse,
    ApproverResponse, DocumentResponse, DocumentDetailResponse, DocumentSummary,
    DocumentListResponse, NextCaseIdResponse, ResetResponse
)

__all__ = [
    'CamelModel', 'UploadResponse', 'SignResponse', 'AddApproversRequest', 'ApprovalLink',
    'AddApproversResponse', 'ApprovalView', 'VoteRequest', 'VoteResponse', 'FinalizeResponse',
    'ApproverResponse', 'DocumentResponse', 'DocumentDetailResponse', 'DocumentSummary',
    'DocumentListResponse', 'NextCaseIdResponse', 'ResetResponse'
]
