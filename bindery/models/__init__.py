from bindery.models.binder import Binder, BinderCard, Occupancy
from bindery.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    CatalogError,
    FailureDetail,
    FailureKind,
    InvalidSlotError,
    InvariantViolationError,
    KnownError,
    NotFoundError,
    OutcomeType,
    PlaceholderCollisionError,
    SlotOccupiedError,
    TransactionFailureError,
    UnauthorizedError,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from bindery.models.reassignment import ReassignmentSet, SlotMove
from bindery.models.slot import DEFAULT_LAYOUT, BinderLayout, SlotIndex

__all__ = [
    "ApiResponse",
    "Binder",
    "BinderCard",
    "BinderLayout",
    "CatalogError",
    "DEFAULT_LAYOUT",
    "FailureDetail",
    "FailureKind",
    "InvalidSlotError",
    "InvariantViolationError",
    "KnownError",
    "NotFoundError",
    "Occupancy",
    "OutcomeType",
    "PlaceholderCollisionError",
    "ReassignmentSet",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "SlotIndex",
    "SlotMove",
    "SlotOccupiedError",
    "TransactionFailureError",
    "UnauthorizedError",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
