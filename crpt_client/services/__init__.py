"""Services composing admission control with the document API call."""

from crpt_client.services.document_service import AsyncDocumentService, DocumentService
from crpt_client.services.factory import create_async_document_service, create_document_service

__all__ = [
    "AsyncDocumentService",
    "DocumentService",
    "create_async_document_service",
    "create_document_service",
]
