"""Rate-limited client for the CRPT document creation API."""

from crpt_client.adapters.rate_limit import (
    AsyncSlidingWindowRateLimiter,
    CancelToken,
    SlidingWindowRateLimiter,
    TimeUnit,
    WindowConfig,
)
from crpt_client.core.errors import AdmissionCancelledError, AppError, InvalidConfigurationError
from crpt_client.schemas import ApiFailure, ApiResult, ApiSuccess, Description, Document, Product
from crpt_client.services import (
    AsyncDocumentService,
    DocumentService,
    create_async_document_service,
    create_document_service,
)

__all__ = [
    "AdmissionCancelledError",
    "ApiFailure",
    "ApiResult",
    "ApiSuccess",
    "AppError",
    "AsyncDocumentService",
    "AsyncSlidingWindowRateLimiter",
    "CancelToken",
    "Description",
    "Document",
    "DocumentService",
    "InvalidConfigurationError",
    "Product",
    "SlidingWindowRateLimiter",
    "TimeUnit",
    "WindowConfig",
    "create_async_document_service",
    "create_document_service",
]
