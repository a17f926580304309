"""Error taxonomy for the Q&A pipeline and its mapping to response payloads."""

from __future__ import annotations

from enum import Enum

import requests

from .schemas import ErrorResponse


class ErrorCode(str, Enum):
    VALIDATION = "VALIDATION"
    SESSION = "SESSION"
    TIMEOUT = "TIMEOUT"
    NETWORK = "NETWORK"
    DATABASE = "DATABASE"
    INTERNAL = "INTERNAL"


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION: 400,
    ErrorCode.SESSION: 404,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.NETWORK: 503,
    ErrorCode.DATABASE: 503,
    ErrorCode.INTERNAL: 500,
}

USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.TIMEOUT: "The request took too long to process. Please try again with a simpler query.",
    ErrorCode.NETWORK: "Unable to connect to the service. Please check your connection and try again.",
    ErrorCode.SESSION: "Your session has expired or is invalid. Please start a new conversation.",
    ErrorCode.DATABASE: "Database service is temporarily unavailable. Please try again in a moment.",
    ErrorCode.VALIDATION: "Invalid input provided. Please check your message and try again.",
    ErrorCode.INTERNAL: "An unexpected error occurred. Please try again or contact support if the issue persists.",
}


class MedragError(Exception):
    """Base class for errors surfaced to callers of the pipeline."""

    code: ErrorCode = ErrorCode.INTERNAL

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.code]


class InputValidationError(MedragError, ValueError):
    """Raised when a question or request payload is malformed."""

    code = ErrorCode.VALIDATION


class SessionError(MedragError):
    """Raised for unknown or invalid session identifiers."""

    code = ErrorCode.SESSION


class StoreError(MedragError):
    """A collaborator store returned an error."""

    code = ErrorCode.DATABASE


class StoreUnavailableError(StoreError):
    """A collaborator store could not be reached at all."""

    code = ErrorCode.NETWORK


def classify_error(exc: BaseException) -> ErrorCode:
    if isinstance(exc, MedragError):
        return exc.code
    if isinstance(exc, TimeoutError):
        return ErrorCode.TIMEOUT
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return ErrorCode.NETWORK
    if isinstance(exc, requests.RequestException):
        return ErrorCode.DATABASE
    return ErrorCode.INTERNAL


def error_payload(exc: BaseException, include_details: bool = False) -> tuple[int, dict]:
    """Return the HTTP-style status and structured body for an exception."""

    code = classify_error(exc)
    body = ErrorResponse(
        error="Failed to process chat message",
        code=code.value,
        message=USER_MESSAGES[code],
        details=(str(exc) or exc.__class__.__name__) if include_details else None,
    )
    return STATUS_CODES[code], body.model_dump(by_alias=True, exclude_none=True)
