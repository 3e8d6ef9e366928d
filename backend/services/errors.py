"""Error codes, service exceptions and the discriminated ActionResult.

Public operations never raise to their caller. Internally, collaborators
raise the exceptions below; each operation boundary converts them into
an ``ActionResult`` carrying exactly one of ``data`` or ``error``.
"""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, model_validator

T = TypeVar("T")


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    LLM_ERROR = "LLM_ERROR"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    RATE_LIMITED = "RATE_LIMITED"
    DB_ERROR = "DB_ERROR"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Invalid input. Please check your data and try again.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.LLM_ERROR: "AI service is temporarily unavailable. Please try again later.",
    ErrorCode.LLM_TIMEOUT: "The AI service took too long to respond. Please try again.",
    ErrorCode.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    ErrorCode.DB_ERROR: "Could not save your changes. Please try again.",
}

# Errors worth retrying from the caller's side.
RETRYABLE_CODES = frozenset({ErrorCode.LLM_ERROR, ErrorCode.LLM_TIMEOUT, ErrorCode.RATE_LIMITED})


class ServiceError(Exception):
    """Base for expected, typed failures raised inside the service layer."""

    code: ErrorCode = ErrorCode.LLM_ERROR

    def __init__(self, message: str = "", code: ErrorCode | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message or ERROR_MESSAGES[self.code]
        super().__init__(self.message)


class InputValidationError(ServiceError):
    code = ErrorCode.VALIDATION_ERROR


class NotFoundError(ServiceError):
    code = ErrorCode.NOT_FOUND


class LLMError(ServiceError):
    code = ErrorCode.LLM_ERROR


class LLMTimeoutError(LLMError):
    code = ErrorCode.LLM_TIMEOUT


class RateLimitedError(LLMError):
    code = ErrorCode.RATE_LIMITED


class StoreError(ServiceError):
    code = ErrorCode.DB_ERROR


class ScoringConsistencyError(RuntimeError):
    """Category weights or scores violate the scoring model's invariants.

    A programmer error, deliberately not a ServiceError: it is never
    translated into a user-facing ActionResult.
    """


class ApiError(BaseModel):
    code: ErrorCode
    message: str

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_CODES


class ActionResult(BaseModel, Generic[T]):
    """Exactly one of ``data`` or ``error`` is set."""

    data: T | None = None
    error: ApiError | None = None

    @model_validator(mode="after")
    def _one_of(self) -> "ActionResult[T]":
        if (self.data is None) == (self.error is None):
            raise ValueError("ActionResult must carry exactly one of data or error")
        return self

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, data: T) -> "ActionResult[T]":
        return cls(data=data)

    @classmethod
    def fail(cls, code: ErrorCode, message: str = "") -> "ActionResult[T]":
        return cls(error=ApiError(code=code, message=message or ERROR_MESSAGES[code]))

    @classmethod
    def from_exception(cls, exc: ServiceError) -> "ActionResult[T]":
        return cls.fail(exc.code, exc.message)
