"""
Failure Envelope and Business Rule Outcomes.

Two layers live here:

1. Core outcomes. Collection and deck operations never raise for expected
   business-rule violations (card in use, deck full, copy limit). They
   return a `Result` carrying either the new value or a `KnownError`
   instance describing the refusal. Callers branch on `result.ok`.

2. The response envelope used by the HTTP layer. Every user-visible failure
   is classified and explained through `ApiResponse`, and every response
   leaves through `finalize_response()`.

INVARIANT: A rejected operation leaves state untouched. A `Result` with an
error never carries a partially mutated value.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Collection / deck rule violations
    IN_USE = "in_use"
    DECK_CAPACITY = "deck_capacity"
    COPY_LIMIT = "copy_limit"
    NO_COPIES_AVAILABLE = "no_copies_available"

    # Persisted data problems (recovered locally)
    MALFORMED_RECORD = "malformed_record"

    # Deck editor lifecycle misuse
    EDITOR_STATE = "editor_state"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
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


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for API endpoints.

    Every response is classified into one of four outcome types,
    ensuring no failure reaches the user unexplained.
    """

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

    # Set only by finalize_response
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def refusal(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a refusal response.

        Use when the system chose not to proceed due to a constraint.
        Example: shrinking a card below the copies used by decks.
        """
        return cls(
            outcome=OutcomeType.REFUSAL,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: card or deck not found.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for known, explainable failures.

    Core operations return instances of these inside a `Result` rather than
    raising them. The HTTP layer may raise them; `to_response()` converts
    them to the envelope.
    """

    refusal: bool = False

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to a finalized ApiResponse."""
        factory = ApiResponse.refusal if self.refusal else ApiResponse.known_failure
        return finalize_response(
            factory(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
            )
        )


class InUseError(KnownError):
    """Quantity reduction blocked because decks hold more copies than requested."""

    refusal = True

    def __init__(self, card_id: str, requested: int, in_use: int) -> None:
        self.card_id = card_id
        self.requested = requested
        self.in_use = in_use
        super().__init__(
            kind=FailureKind.IN_USE,
            message=(
                f"Cannot reduce quantity to {requested}. "
                f"This card is currently used {in_use} time(s) across your decks."
            ),
            detail=f"card_id={card_id}",
            suggestion="Remove the card from your decks first.",
            status_code=409,
        )


class CapacityError(KnownError):
    """Deck section is full."""

    refusal = True

    def __init__(self, section: str, limit: int) -> None:
        self.section = section
        self.limit = limit
        super().__init__(
            kind=FailureKind.DECK_CAPACITY,
            message=f"The {section} deck already holds the maximum of {limit} cards.",
            suggestion="Remove a card from that section first.",
            status_code=409,
        )


class CopyLimitError(KnownError):
    """Deck already holds the maximum copies of a print."""

    refusal = True

    def __init__(self, card_id: str, limit: int) -> None:
        self.card_id = card_id
        self.limit = limit
        super().__init__(
            kind=FailureKind.COPY_LIMIT,
            message=f"A deck may hold at most {limit} copies of the same card.",
            detail=f"card_id={card_id}",
            status_code=409,
        )


class NoCopiesAvailableError(KnownError):
    """Every owned copy of a print is already committed to decks."""

    refusal = True

    def __init__(self, card_id: str, owned: int) -> None:
        self.card_id = card_id
        self.owned = owned
        super().__init__(
            kind=FailureKind.NO_COPIES_AVAILABLE,
            message=f"All {owned} owned copies of this card are already in decks.",
            detail=f"card_id={card_id}",
            suggestion="Add more copies to your collection or free one from another deck.",
            status_code=409,
        )


class InvalidInputError(KnownError):
    """Request data failed validation."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            status_code=422,
        )


class NotFoundError(KnownError):
    """A referenced card or deck does not exist."""

    def __init__(self, what: str, identifier: str) -> None:
        self.what = what
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{what.capitalize()} '{identifier}' not found.",
            status_code=404,
        )


class MalformedRecordError(KnownError):
    """A single persisted record could not be migrated and was skipped."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(
            kind=FailureKind.MALFORMED_RECORD,
            message=f"Record {index} is unusable and was skipped.",
            detail=reason,
        )


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Discriminated outcome of a core mutation.

    Exactly one of `value` / `error` is meaningful. Use `Result.success()`
    and `Result.failure()` rather than the constructor.
    """

    value: T | None = None
    error: KnownError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: KnownError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# All user-visible responses MUST pass through this boundary.
#
# =============================================================================


# Standard messages: fixed and predictable
STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: (
        "The system cannot proceed with this request due to a constraint violation."
    ),
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: (
        "Something went wrong and the cause is unknown. Please retry the request."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: "Please modify your request to satisfy the constraint.",
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Every response that passes through this function is guaranteed to
    have a valid outcome classification and failure details when it is
    not a success.

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


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)
