"""
Error Contracts

Typed failures surfaced by the data layer.

PROPAGATION RULES:
==================
1. Transport and mutations never retry; the first failure is final
2. The cache swallows exactly one case: HTTP 401 under RETURN_NULL
3. Everything else reaches the caller unchanged
4. Presentation (toasts, banners) belongs to the caller
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Optional


class ErrorCode(Enum):
    """
    Explicit error codes for every failure the data layer can produce.
    """
    NETWORK_UNREACHABLE = auto()
    HTTP_STATUS = auto()
    MALFORMED_BODY = auto()


class StudioError(Exception):
    """Base class for all data-layer failures."""

    code: ErrorCode = ErrorCode.NETWORK_UNREACHABLE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(StudioError):
    """The exchange could not complete (connect failure, timeout, reset)."""

    code = ErrorCode.NETWORK_UNREACHABLE

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.target = target


class HttpError(StudioError):
    """
    The server answered with a non-success status.

    Renders as ``"<status>: <message>"``.
    """

    code = ErrorCode.HTTP_STATUS

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def __str__(self) -> str:
        return f"{self.status}: {self.message}"

    def __repr__(self) -> str:
        return f"HttpError(status={self.status!r}, message={self.message!r})"


class DecodeError(StudioError):
    """Body declared JSON but did not parse."""

    code = ErrorCode.MALFORMED_BODY

    def __init__(self, message: str, content_type: str = ""):
        super().__init__(message)
        self.content_type = content_type


def describe_error(error: BaseException) -> str:
    """Text a view collaborator can show for a failed call."""
    if isinstance(error, StudioError):
        return str(error)
    return f"{type(error).__name__}: {error}"
