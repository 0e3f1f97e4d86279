"""
Failure envelope and typed errors for binder operations.

Every failure that reaches a caller is classified into a FailureKind
and wrapped in the same ApiResponse envelope, so clients can branch on
`failure.kind` and `failure.retryable` instead of parsing messages.

Response types:
- Success: Operation completed successfully
- KnownFailure: System knows why it failed (not found, unauthorized, ...)
- UnknownFailure: System does not know why it failed

AUTHORITY BOUNDARY:
Failure envelopes are produced only through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"

    # Constraint violations
    SLOT_OCCUPIED = "slot_occupied"

    # Storage failures
    TRANSACTION_FAILURE = "transaction_failure"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"

    # Internal errors
    INVARIANT_VIOLATION = "invariant_violation"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )
    retryable: bool = Field(
        default=False,
        description="True if resubmitting against freshly fetched state may succeed",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope used for every failure the API reports."""

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set only by finalize_response; never serialized
    _finalized: bool = PrivateAttr(default=False)


# Standard exception types that map to known failures


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    kind: FailureKind = FailureKind.UNKNOWN
    status_code: int = 400
    retryable: bool = False
    suggestion: str | None = None

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.detail = detail
        if suggestion is not None:
            self.suggestion = suggestion
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to a finalized ApiResponse."""
        response: ApiResponse[Any] = ApiResponse(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion or STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE],
                retryable=self.retryable,
            ),
        )
        return finalize_response(response)


class InvalidSlotError(KnownError):
    """A slot index that cannot address a committed position."""

    kind = FailureKind.INVALID_INPUT
    status_code = 400

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            message=f"Slot index must be a non-negative integer, got {value!r}",
        )


class NotFoundError(KnownError):
    """Referenced binder, card, or slot does not exist."""

    kind = FailureKind.NOT_FOUND
    status_code = 404

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(message=f"{resource} '{identifier}' not found")


class UnauthorizedError(KnownError):
    """Caller is not the binder's owner (or presented no identity)."""

    kind = FailureKind.UNAUTHORIZED
    status_code = 403

    def __init__(self, message: str = "Unauthorized", status_code: int | None = None):
        super().__init__(message=message, status_code=status_code)


class SlotOccupiedError(KnownError):
    """An add-to-slot intent targets a slot that already holds a card."""

    kind = FailureKind.SLOT_OCCUPIED
    status_code = 409
    suggestion = "Pick an empty slot or request a shift to make room."

    def __init__(self, slot: int, occupant_id: str):
        self.slot = slot
        self.occupant_id = occupant_id
        super().__init__(
            message=f"Slot {slot} is already occupied",
            detail=f"occupant={occupant_id}",
        )


class InvariantViolationError(KnownError):
    """
    A reassignment set would leave two cards at the same index.

    Signals a planning defect; such a plan never reaches storage.
    """

    kind = FailureKind.INVARIANT_VIOLATION
    status_code = 500

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message=message, detail=detail)


class PlaceholderCollisionError(InvariantViolationError):
    """Phase 1 of a commit collided on a transient negative index."""


class TransactionFailureError(KnownError):
    """Storage aborted the batch; nothing was applied."""

    kind = FailureKind.TRANSACTION_FAILURE
    status_code = 409
    retryable = True
    suggestion = "Reload the binder and resubmit the edit."

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message=message, detail=detail)


class CatalogError(KnownError):
    """The card catalog could not answer a lookup."""

    kind = FailureKind.EXTERNAL_API_ERROR
    status_code = 502
    retryable = True

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message=message, detail=detail)


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.UNKNOWN_FAILURE: (
        "The operation failed for an unexpected reason. Reload the binder and retry."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed; only the exception type name is exposed.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=type(exception).__name__,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)
