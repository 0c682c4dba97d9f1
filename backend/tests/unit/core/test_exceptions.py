"""
Unit Tests for the error hierarchy and its HTTP mapping
"""
from mosqueconnect.core.exceptions import (
    MosqueConnectError,
    AuthenticationError,
    AuthorizationError,
    ResourceNotFoundError,
    ValidationError,
    InvalidIdError,
    DuplicateEmailError,
    InvalidStatusTransitionError,
    OfferNotValidError,
    OfferUsageLimitError,
    ExternalServiceError,
    error_response,
)


class TestStatusCodes:

    def test_each_error_maps_to_its_status(self):
        assert AuthenticationError().status_code == 401
        assert AuthorizationError().status_code == 403
        assert ResourceNotFoundError("Mosque", "abc").status_code == 404
        assert ValidationError("bad").status_code == 400
        assert InvalidIdError("Mosque", "abc").status_code == 400
        assert DuplicateEmailError("a@example.com").status_code == 409
        assert InvalidStatusTransitionError("mosque", "approved", "rejected").status_code == 409
        assert OfferNotValidError("o-1").status_code == 400
        assert OfferUsageLimitError("o-1", 5).status_code == 409
        assert ExternalServiceError("Aladhan", "timeout").status_code == 502

    def test_base_error_is_internal(self):
        assert MosqueConnectError("boom").status_code == 500


class TestErrorPayloads:

    def test_not_found_code_and_details(self):
        error = ResourceNotFoundError("Halal Certification", "123")

        assert error.code == "HALAL_CERTIFICATION_NOT_FOUND"
        assert error.details == {"resource_type": "Halal Certification", "resource_id": "123"}

    def test_transition_error_lists_allowed_targets(self):
        error = InvalidStatusTransitionError("certification", "pending", "approved", ["under_review"])

        assert error.code == "INVALID_STATUS_TRANSITION"
        assert error.details["allowed"] == ["under_review"]
        assert "pending" in error.message

    def test_validation_error_field(self):
        assert ValidationError("too big", field="discount_value").details == {"field": "discount_value"}

    def test_error_response_envelope(self):
        body = error_response(OfferUsageLimitError("o-1", 2))

        assert body["success"] is False
        assert body["error"]["code"] == "OFFER_USAGE_LIMIT_REACHED"
        assert body["error"]["details"] == {"offer_id": "o-1", "usage_limit": 2}
