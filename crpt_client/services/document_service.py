"""Document creation service gating every API call behind the admission limiter.

This service is the entry point callers use. For each document it:
- Waits for admission from the sliding-window limiter
- Serializes the document into the JSON request body
- Performs exactly one HTTP exchange through the transport
- Maps the outcome into an ``ApiResult`` without raising

There are no retries and consumed admissions are never returned, even when
the request fails afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from crpt_client.adapters.rate_limit.base import (
    AbstractAsyncWindowLimiter,
    AbstractWindowLimiter,
    CancelToken,
)
from crpt_client.adapters.transport.base import (
    AbstractAsyncDocumentTransport,
    AbstractDocumentTransport,
    TransportResponse,
)
from crpt_client.core.errors import (
    AdmissionCancelledError,
    AppError,
    RemoteRejectionError,
    SerializationAppError,
    TransportAppError,
)
from crpt_client.core.logging import new_operation_id, reset_operation_id, set_operation_id
from crpt_client.schemas.document import Document
from crpt_client.schemas.result import ApiFailure, ApiResult, ApiSuccess, FailureCode

logger = logging.getLogger(__name__)

DocumentInput = Document | Mapping[str, Any]


def serialize_document(document: DocumentInput) -> bytes:
    """Validate and serialize a document into the request body.

    Args:
        document: A ``Document`` or a mapping with its fields (snake_case or camelCase).

    Returns:
        UTF-8 JSON bytes.

    Raises:
        SerializationAppError: If the input is not a valid document or cannot be encoded.
    """
    try:
        if not isinstance(document, Document):
            document = Document.model_validate(document)
        return document.to_request_body()
    except (ValidationError, PydanticSerializationError, TypeError, ValueError) as exc:
        raise SerializationAppError(
            code="serialization_error",
            message=f"JSON serialization error: {exc}",
        ) from exc


def check_response(response: TransportResponse) -> ApiSuccess:
    """Turn a 2xx response into ``ApiSuccess``.

    Raises:
        RemoteRejectionError: For any status outside [200, 300).
    """
    if response.is_success:
        return ApiSuccess(status_code=response.status_code, data=response.body)

    text = response.body.decode("utf-8", errors="replace")
    raise RemoteRejectionError(
        code="remote_rejection",
        message=f"HTTP error {response.status_code}: {text}",
        details={"http_status": response.status_code},
        status_code=response.status_code,
    )


_FAILURE_CODES: dict[type[AppError], FailureCode] = {
    AdmissionCancelledError: "cancelled",
    SerializationAppError: "serialization_error",
    TransportAppError: "transport_error",
    RemoteRejectionError: "remote_rejection",
}


def _to_failure(exc: AppError, body: bytes | None = None) -> ApiFailure:
    status_code = exc.status_code if isinstance(exc, RemoteRejectionError) else None
    return ApiFailure(
        code=_FAILURE_CODES[type(exc)],
        message=exc.message,
        status_code=status_code,
        data=body,
    )


def _unexpected_failure(exc: Exception) -> ApiFailure:
    """Report an error outside the known failure categories.

    Must be called from an ``except`` block so the traceback is logged.
    """
    logger.exception(
        "document.create.unexpected_error",
        extra={"error_type": type(exc).__name__},
    )
    return ApiFailure(code="unexpected_error", message=f"Unexpected error: {exc}")


def _log_outcome(result: ApiResult) -> None:
    if isinstance(result, ApiSuccess):
        logger.info("document.create.succeeded", extra={"status_code": result.status_code})
    else:
        logger.warning(
            "document.create.failed",
            extra={"failure_code": result.code, "status_code": result.status_code},
        )


class DocumentService:
    """Blocking gated operation: one admission buys one document creation attempt."""

    def __init__(
        self,
        limiter: AbstractWindowLimiter,
        transport: AbstractDocumentTransport,
    ) -> None:
        self.limiter = limiter
        self.transport = transport

    def __enter__(self) -> "DocumentService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    def create_document(
        self,
        document: DocumentInput,
        signature: str,
        *,
        cancel_token: CancelToken | None = None,
    ) -> ApiResult:
        """Create a document, waiting for admission first.

        Args:
            document: Document to submit.
            signature: Signature forwarded in the ``Signature`` header.
            cancel_token: Optional token that aborts the wait for admission.

        Returns:
            ApiSuccess on a 2xx answer, ApiFailure for everything else.
        """
        token = set_operation_id(new_operation_id())
        try:
            result = self._create_document(document, signature, cancel_token)
            _log_outcome(result)
            return result
        finally:
            reset_operation_id(token)

    def _create_document(
        self,
        document: DocumentInput,
        signature: str,
        cancel_token: CancelToken | None,
    ) -> ApiResult:
        response: TransportResponse | None = None
        try:
            self.limiter.acquire(cancel_token)
            body = serialize_document(document)
            response = self.transport.send(body, signature)
            return check_response(response)
        except AppError as exc:
            if type(exc) not in _FAILURE_CODES:
                return _unexpected_failure(exc)
            return _to_failure(exc, response.body if response is not None else None)
        except Exception as exc:
            return _unexpected_failure(exc)


class AsyncDocumentService:
    """Asyncio gated operation.

    Task cancellation while waiting for admission (or during the request)
    propagates as ``asyncio.CancelledError`` rather than becoming a result.
    """

    def __init__(
        self,
        limiter: AbstractAsyncWindowLimiter,
        transport: AbstractAsyncDocumentTransport,
    ) -> None:
        self.limiter = limiter
        self.transport = transport

    async def __aenter__(self) -> "AsyncDocumentService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def create_document(self, document: DocumentInput, signature: str) -> ApiResult:
        """Async twin of ``DocumentService.create_document``."""

        token = set_operation_id(new_operation_id())
        try:
            result = await self._create_document(document, signature)
            _log_outcome(result)
            return result
        finally:
            reset_operation_id(token)

    async def _create_document(self, document: DocumentInput, signature: str) -> ApiResult:
        response: TransportResponse | None = None
        try:
            await self.limiter.acquire()
            body = serialize_document(document)
            response = await self.transport.send(body, signature)
            return check_response(response)
        except AppError as exc:
            if type(exc) not in _FAILURE_CODES:
                return _unexpected_failure(exc)
            return _to_failure(exc, response.body if response is not None else None)
        except Exception as exc:
            return _unexpected_failure(exc)
