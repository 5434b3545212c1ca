"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that might load settings,
so tests never pick up a developer's .env file or real endpoint.
"""

import os
import time
from typing import Callable

import pytest

os.environ["CRPT_ENV"] = "testing"
os.environ.setdefault("CRPT_API_BASE_URL", "https://crpt.test/api/v3")
os.environ.setdefault("CRPT_RATE_LIMIT_REQUESTS", "5")
os.environ.setdefault("CRPT_RATE_LIMIT_WINDOW_SECONDS", "1.0")

from crpt_client.schemas.document import Description, Document, Product  # noqa: E402


class FakeClock:
    """Deterministic clock for limiter decisions that never need to sleep."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it holds; fail the test on timeout."""

    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("condition not reached in time")
        time.sleep(0.005)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_document() -> Document:
    return Document(
        description=Description(participant_inn="7701234567"),
        doc_id="doc-1",
        doc_type="LP_INTRODUCE_GOODS",
        owner_inn="7701234567",
        participant_inn="7701234567",
        producer_inn="7707654321",
        production_date="2024-01-15",
        production_type="OWN_PRODUCTION",
        products=[
            Product(
                certificate_document="CONFORMITY_CERTIFICATE",
                owner_inn="7701234567",
                producer_inn="7707654321",
                production_date="2024-01-15",
                tnved_code="6401100000",
                uit_code="010460043993125621JgXJ5.T",
            )
        ],
    )


@pytest.fixture(name="wait_until")
def wait_until_fixture() -> Callable[..., None]:
    return wait_until
