"""Transport layer - sends serialized documents to the CRPT API."""

from crpt_client.adapters.transport.base import (
    AbstractAsyncDocumentTransport,
    AbstractDocumentTransport,
    TransportResponse,
)
from crpt_client.adapters.transport.httpx_transport import (
    AsyncHttpxDocumentTransport,
    HttpxDocumentTransport,
)

__all__ = [
    "AbstractAsyncDocumentTransport",
    "AbstractDocumentTransport",
    "AsyncHttpxDocumentTransport",
    "HttpxDocumentTransport",
    "TransportResponse",
]
