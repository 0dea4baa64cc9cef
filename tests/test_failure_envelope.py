"""
Tests for the response envelope.

These tests verify:
- Every outcome carries the right fields
- Factory functions pass through the authority boundary
- Known errors keep their classification and status code
- Unknown failures expose only the exception type
"""

import pytest

from sekaideck.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    DeckInvariantError,
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OutcomeType,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from sekaideck.models.skill import UnknownSkillEffectError


class TestAuthorityBoundary:
    """Responses must pass through finalize_response()."""

    def test_unfinalized_response_not_marked(self) -> None:
        """Responses that bypass the boundary are detectable."""
        response = ApiResponse(outcome=OutcomeType.SUCCESS, data=[])
        assert not is_finalized(response)

    def test_success_with_failure_raises(self) -> None:
        response = ApiResponse(
            outcome=OutcomeType.SUCCESS,
            data=[],
            failure=FailureDetail(kind=FailureKind.UNKNOWN, message="oops"),
        )

        with pytest.raises(ValueError, match="must not have failure"):
            finalize_response(response)

    def test_failure_without_details_raises(self) -> None:
        response = ApiResponse(outcome=OutcomeType.KNOWN_FAILURE, failure=None)

        with pytest.raises(ValueError, match="must have failure details"):
            finalize_response(response)


class TestFactories:
    def test_empty_success_is_success(self) -> None:
        """An empty deck list is a success."""
        response = create_success([])

        assert is_finalized(response)
        assert response.outcome == OutcomeType.SUCCESS
        assert response.data == []
        assert response.failure is None

    def test_not_found_is_known_failure(self) -> None:
        error = NotFoundError("Event", detail="id=404")
        response = create_known_failure(error)

        assert is_finalized(response)
        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.kind == FailureKind.NOT_FOUND
        assert response.failure.message == "Event not found"
        assert response.failure.detail == "id=404"
        assert error.status_code == 404

    def test_invariant_error_uses_standard_suggestion(self) -> None:
        error = DeckInvariantError("Deck contains the same character twice")
        response = create_known_failure(error)

        assert response.failure is not None
        assert response.failure.kind == FailureKind.INVARIANT_VIOLATION
        assert response.failure.suggestion == STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE]
        assert error.status_code == 400

    def test_unknown_failure_uses_standard_message(self) -> None:
        """Unknown failures never echo the exception message."""
        response = create_unknown_failure(ValueError("secret internals"))

        assert response.failure is not None
        assert response.failure.message == STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE]
        assert response.failure.detail == "ValueError"
        assert "secret" not in response.model_dump_json()

    def test_unknown_failure_without_type(self) -> None:
        response = create_unknown_failure(ValueError("x"), include_type=False)

        assert response.failure is not None
        assert response.failure.detail is None

    def test_unknown_skill_effect_is_known_failure(self) -> None:
        """Unreadable master data is classified, not an unknown failure."""
        error = UnknownSkillEffectError("score_up_mystery")
        response = create_known_failure(error)

        assert isinstance(error, KnownError)
        assert response.outcome == OutcomeType.KNOWN_FAILURE
        assert response.failure is not None
        assert response.failure.kind == FailureKind.UNSUPPORTED_DATA
        assert response.failure.detail == "score_up_mystery"
        assert error.status_code == 500


class TestFinalizedMarker:
    """The finalized marker lives on the response itself."""

    def test_marker_is_per_instance(self) -> None:
        finalized = create_success([])
        twin = ApiResponse(outcome=OutcomeType.SUCCESS, data=[])

        assert is_finalized(finalized)
        assert not is_finalized(twin)

    def test_new_response_after_discard_is_not_finalized(self) -> None:
        """A fresh object never inherits a discarded response's marker."""
        for _ in range(100):
            create_success([])
            assert not is_finalized(ApiResponse(outcome=OutcomeType.SUCCESS, data=[]))

    def test_marker_not_serialized(self) -> None:
        response = create_success([])
        assert "_finalized" not in response.model_dump()
