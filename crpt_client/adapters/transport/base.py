"""Transport interfaces for the document creation endpoint.

Services depend on these abstractions so the HTTP stack can be replaced
(or faked in tests) without touching admission or result mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class TransportResponse:
    """Raw outcome of one HTTP exchange.

    Attributes:
        status_code: HTTP status code returned by the server.
        body: Response body bytes (possibly empty).
    """

    status_code: int
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class AbstractDocumentTransport(ABC):
    """Interface for blocking transports."""

    @abstractmethod
    def send(self, body: bytes, signature: str) -> TransportResponse:
        """Send one serialized document.

        Args:
            body: JSON-encoded document.
            signature: Signature/credential string forwarded in the request headers.

        Returns:
            TransportResponse for any status code the server answered with.

        Raises:
            TransportAppError: If no response could be obtained.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release network resources held by the transport."""


class AbstractAsyncDocumentTransport(ABC):
    """Interface for asyncio transports."""

    @abstractmethod
    async def send(self, body: bytes, signature: str) -> TransportResponse:
        """Async twin of ``AbstractDocumentTransport.send``."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources held by the transport."""
