"""Result types returned by the document services.

``ApiResult`` is a closed union: callers branch on ``result.success`` (or
``isinstance``) and read structured fields instead of parsing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

FailureCode = Literal[
    "remote_rejection",
    "transport_error",
    "serialization_error",
    "cancelled",
    "unexpected_error",
]


@dataclass(frozen=True)
class ApiSuccess:
    """The API accepted the document (2xx status).

    Attributes:
        status_code: HTTP status code in [200, 300).
        message: Human-readable summary.
        data: Response body, if the server returned one.
    """

    status_code: int
    message: str = "Document created successfully"
    data: bytes | None = None

    @property
    def success(self) -> Literal[True]:
        return True


@dataclass(frozen=True)
class ApiFailure:
    """The document was not created.

    Attributes:
        code: Machine-readable failure category.
        message: Human-readable message (embeds the status code for rejections).
        status_code: HTTP status code when the server answered, else None.
        data: Response body of a rejection, if any.
    """

    code: FailureCode
    message: str
    status_code: int | None = None
    data: bytes | None = None

    @property
    def success(self) -> Literal[False]:
        return False


ApiResult = Union[ApiSuccess, ApiFailure]
