"""Request payloads and result types."""

from crpt_client.schemas.document import Description, Document, Product
from crpt_client.schemas.result import ApiFailure, ApiResult, ApiSuccess

__all__ = [
    "ApiFailure",
    "ApiResult",
    "ApiSuccess",
    "Description",
    "Document",
    "Product",
]
