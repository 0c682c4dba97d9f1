"""
Custom Exceptions for MosqueConnect
===================================

Raise these from endpoints and services instead of generic Exception.
The handlers registered in main.py turn them into JSON error responses
using `status_code` and `to_dict()`.

Usage:
    from mosqueconnect.core.exceptions import ResourceNotFoundError

    mosque = await db.get(Mosque, mosque_id)
    if not mosque:
        raise ResourceNotFoundError("Mosque", mosque_id)
"""

from typing import Optional, Any, Dict, Iterable


class MosqueConnectError(Exception):
    """Base exception for all MosqueConnect errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(MosqueConnectError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(MosqueConnectError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(MosqueConnectError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(MosqueConnectError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidIdError(ValidationError):
    """Identifier is not a valid UUID"""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"Invalid {resource_type.lower()} ID format")
        self.code = "INVALID_ID"
        self.details = {"resource_type": resource_type, "resource_id": resource_id}


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(MosqueConnectError):
    """Request conflicts with existing state"""

    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, code=code)


class DuplicateEmailError(ConflictError):
    """Email address already registered"""

    def __init__(self, email: str):
        super().__init__("User with this email already exists", code="EMAIL_EXISTS")
        self.details = {"email": email}


class InvalidStatusTransitionError(ConflictError):
    """Requested status change is not allowed from the current status"""

    def __init__(self, entity_type: str, current: str, target: str, allowed: Iterable[str] = ()):
        super().__init__(
            f"Cannot change {entity_type} status from '{current}' to '{target}'",
            code="INVALID_STATUS_TRANSITION"
        )
        self.details = {
            "entity_type": entity_type,
            "current_status": current,
            "target_status": target,
            "allowed": sorted(allowed),
        }


# ============================================
# Offer Errors
# ============================================

class OfferNotValidError(MosqueConnectError):
    """Offer is not active or outside its validity window"""

    status_code = 400

    def __init__(self, offer_id: str, message: str = "Offer is not valid or has expired"):
        super().__init__(message, code="OFFER_NOT_VALID")
        self.details = {"offer_id": offer_id}


class OfferUsageLimitError(ConflictError):
    """Offer has reached its usage limit"""

    def __init__(self, offer_id: str, usage_limit: int):
        super().__init__("Offer usage limit reached", code="OFFER_USAGE_LIMIT_REACHED")
        self.details = {"offer_id": offer_id, "usage_limit": usage_limit}


# ============================================
# External Service Errors
# ============================================

class ExternalServiceError(MosqueConnectError):
    """Upstream HTTP service failed"""

    status_code = 502

    def __init__(self, service: str, message: str):
        super().__init__(f"{service} request failed: {message}", code="EXTERNAL_SERVICE_ERROR")
        self.details = {"service": service}


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: MosqueConnectError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
