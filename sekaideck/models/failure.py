"""
Failure Explanation Envelope: Unified Response Classification.

Every deck recommendation that leaves the HTTP surface is wrapped in the
same envelope so the presentation layer can tell an empty result apart
from a failure.

INVARIANT: An empty deck list is a SUCCESS, never a failure.
INVARIANT: A failure is never reported as an empty deck list.

Response types:
- Success: Search completed (the result list may be empty)
- KnownFailure: Input data is missing or violates a deck invariant
- UnknownFailure: Anything else

AUTHORITY BOUNDARY:
All user-visible responses MUST pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Data integrity failures (missing master/user records)
    NOT_FOUND = "not_found"

    # Master data the resolver cannot interpret
    UNSUPPORTED_DATA = "unsupported_data"

    # Contract misuse
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


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope for all deck endpoints.

    Every response is classified into one of three outcome types.
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

    # Set only by finalize_response()
    _finalized: bool = PrivateAttr(default=False)


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

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


class NotFoundError(KnownError):
    """
    A referenced master or user record does not exist.

    Raised for missing skills, skill-effect details at the player's skill
    level, user character ranks, events, and skill case keys. These point
    at corrupt or incomplete input data and are never retried.
    """

    def __init__(self, what: str, detail: str | None = None):
        self.what = what
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{what} not found",
            detail=detail,
            suggestion="Check that master data and user data are complete and up to date.",
            status_code=404,
        )


class DeckInvariantError(KnownError):
    """
    A card sequence violates a deck invariant.

    Raised for duplicate characters (or duplicate cards in single-character
    decks) and for member counts outside 2-5. This is a programming error
    on the caller's side, not a recoverable condition.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVARIANT_VIOLATION,
            message=message,
            detail=detail,
            status_code=400,
        )


class UnsupportedDataError(KnownError):
    """
    Master data carries a value the resolver has no rule for.

    The request itself is fine; the loaded master data is newer than the
    resolver or corrupt.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.UNSUPPORTED_DATA,
            message=message,
            detail=detail,
            suggestion="Update the resolver or re-download master data.",
            status_code=500,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

# Standard messages

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: (
        "I failed and I don't know why. Try simplifying the request or retrying."
    ),
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Args:
        response: The ApiResponse to finalize

    Returns:
        The same response, marked as having passed through the boundary

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


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """
    Create a known failure response from a KnownError.

    Args:
        error: The classified error

    Returns:
        A finalized known failure response
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.KNOWN_FAILURE,
        failure=FailureDetail(
            kind=error.kind,
            message=error.message,
            detail=error.detail,
            suggestion=error.suggestion or STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE],
        ),
    )

    return finalize_response(response)


def create_success(data: T) -> ApiResponse[T]:
    """
    Create a success response.

    Args:
        data: The response data (an empty list is a valid success)

    Returns:
        A finalized success response
    """
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
