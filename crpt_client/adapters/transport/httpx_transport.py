"""httpx-based transports for the CRPT document creation endpoint."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from crpt_client.adapters.transport.base import (
    AbstractAsyncDocumentTransport,
    AbstractDocumentTransport,
    TransportResponse,
)
from crpt_client.core.errors import TransportAppError

logger = logging.getLogger(__name__)


def _build_timeout(timeout_seconds: float, connect_timeout_seconds: float | None) -> httpx.Timeout:
    return httpx.Timeout(timeout_seconds, connect=connect_timeout_seconds or timeout_seconds)


def _build_headers(signature: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Signature": signature,
    }


def _transport_error(exc: Exception, url: str) -> TransportAppError:
    return TransportAppError(
        code="transport_error",
        message=f"IO error: {exc}",
        details={"url": url, "context": {"exception": type(exc).__name__}},
    )


class _EndpointMixin:
    """URL handling shared by the sync and async transports."""

    base_url: str
    path: str

    def _init_endpoint(self, base_url: str, path: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path if path.startswith("/") else f"/{path}"

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"


class HttpxDocumentTransport(_EndpointMixin, AbstractDocumentTransport):
    """Blocking transport built on ``httpx.Client``.

    If ``client`` is provided it is used for all requests and left open on
    ``close()``; otherwise the transport owns a client of its own.
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        *,
        timeout_seconds: float = 30.0,
        connect_timeout_seconds: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._init_endpoint(base_url, path)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(
            timeout=_build_timeout(timeout_seconds, connect_timeout_seconds),
        )

    def __enter__(self) -> "HttpxDocumentTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def send(self, body: bytes, signature: str) -> TransportResponse:
        url = self.url
        try:
            response = self._client.post(url, content=body, headers=_build_headers(signature))
        # Non-ASCII header values fail while httpx builds the request.
        except (httpx.HTTPError, UnicodeEncodeError) as exc:
            logger.warning(
                "transport.request_failed",
                extra={"url": url, "error_type": type(exc).__name__},
            )
            raise _transport_error(exc, url) from exc

        logger.debug(
            "transport.response",
            extra={"url": url, "status_code": response.status_code},
        )
        return TransportResponse(status_code=response.status_code, body=response.content)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class AsyncHttpxDocumentTransport(_EndpointMixin, AbstractAsyncDocumentTransport):
    """Asyncio transport built on ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        path: str,
        *,
        timeout_seconds: float = 30.0,
        connect_timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._init_endpoint(base_url, path)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(
            timeout=_build_timeout(timeout_seconds, connect_timeout_seconds),
        )

    async def __aenter__(self) -> "AsyncHttpxDocumentTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def send(self, body: bytes, signature: str) -> TransportResponse:
        url = self.url
        try:
            response = await self._client.post(
                url, content=body, headers=_build_headers(signature)
            )
        # Non-ASCII header values fail while httpx builds the request.
        except (httpx.HTTPError, UnicodeEncodeError) as exc:
            logger.warning(
                "transport.request_failed",
                extra={"url": url, "error_type": type(exc).__name__},
            )
            raise _transport_error(exc, url) from exc

        logger.debug(
            "transport.response",
            extra={"url": url, "status_code": response.status_code},
        )
        return TransportResponse(status_code=response.status_code, body=response.content)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
