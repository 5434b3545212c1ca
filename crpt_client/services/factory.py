"""Factory functions building document services from settings."""

from __future__ import annotations

import httpx

from crpt_client.adapters.rate_limit.async_sliding_window import AsyncSlidingWindowRateLimiter
from crpt_client.adapters.rate_limit.base import WindowConfig
from crpt_client.adapters.rate_limit.sliding_window import SlidingWindowRateLimiter
from crpt_client.adapters.transport.httpx_transport import (
    AsyncHttpxDocumentTransport,
    HttpxDocumentTransport,
)
from crpt_client.core.config import Settings
from crpt_client.core.config import settings as default_settings
from crpt_client.services.document_service import AsyncDocumentService, DocumentService


def _window_config(cfg: Settings) -> WindowConfig:
    return WindowConfig(
        capacity=cfg.rate_limit.requests,
        window_seconds=cfg.rate_limit.window_seconds,
    )


def create_document_service(
    settings: Settings | None = None,
    *,
    client: httpx.Client | None = None,
) -> DocumentService:
    """Build a blocking ``DocumentService``.

    Args:
        settings: Settings to use; defaults to the global settings instance.
        client: Optional shared ``httpx.Client`` (left open when the service closes).

    Returns:
        DocumentService with its own limiter.

    Raises:
        InvalidConfigurationError: If the rate limit settings are invalid.
    """
    cfg = settings or default_settings
    limiter = SlidingWindowRateLimiter.from_config(_window_config(cfg))
    transport = HttpxDocumentTransport(
        cfg.api.base_url,
        cfg.api.create_document_path,
        timeout_seconds=cfg.api.timeout_seconds,
        connect_timeout_seconds=cfg.api.connect_timeout_seconds,
        client=client,
    )
    return DocumentService(limiter, transport)


def create_async_document_service(
    settings: Settings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> AsyncDocumentService:
    """Build an ``AsyncDocumentService``; see ``create_document_service``."""

    cfg = settings or default_settings
    limiter = AsyncSlidingWindowRateLimiter.from_config(_window_config(cfg))
    transport = AsyncHttpxDocumentTransport(
        cfg.api.base_url,
        cfg.api.create_document_path,
        timeout_seconds=cfg.api.timeout_seconds,
        connect_timeout_seconds=cfg.api.connect_timeout_seconds,
        client=client,
    )
    return AsyncDocumentService(limiter, transport)
