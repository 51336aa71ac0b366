"""
Custom Exceptions for DinTask
=============================

Every error a handler raises on purpose derives from DinTaskError and carries
the HTTP status it maps to. The handlers registered in main.py render them
into the common envelope:

    {"success": false, "error": "<message>", "code": "<CODE>"}

Usage:
    from dintask.core.exceptions import ResourceNotFoundError

    lead = await db.get(Lead, lead_id)
    if not lead:
        raise ResourceNotFoundError("Lead")
"""

from datetime import datetime
from typing import Optional, Any, Dict


class DinTaskError(Exception):
    """Base exception for all DinTask errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
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

class AuthenticationError(DinTaskError):
    """Missing/invalid token, unknown account or wrong credentials"""

    status_code = 401

    def __init__(self, message: str = "Not authorized to access this route"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(DinTaskError):
    """Role not allowed, or record belongs to another workspace"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


class SubscriptionExpiredError(AuthorizationError):
    """Tenant admin's subscription has lapsed"""

    def __init__(self, message: str, expiry_date: Optional[datetime] = None):
        super().__init__(message)
        self.code = "SUBSCRIPTION_EXPIRED"
        self.expiry_date = expiry_date


class UserLimitExceededError(AuthorizationError):
    """Plan user limit reached"""

    def __init__(self, message: str, limit: int = 0, current: int = 0):
        super().__init__(message)
        self.code = "USER_LIMIT_REACHED"
        self.details = {"limit": limit, "current": current}


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(DinTaskError):
    """Record does not exist"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_id": resource_id} if resource_id else None
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(DinTaskError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ScheduleConflictError(ValidationError):
    """Overlapping schedule on the same date"""

    def __init__(self, message: str):
        super().__init__(message)
        self.code = "SCHEDULE_CONFLICT"


class InvalidFileTypeError(ValidationError):
    """File type not allowed"""

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(
            f"File type '{file_type}' not allowed. Allowed: {', '.join(allowed_types)}"
        )
        self.code = "INVALID_FILE_TYPE"
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


# ============================================
# Payment Errors
# ============================================

class PaymentError(DinTaskError):
    """Payment operation failed"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="PAYMENT_ERROR")


# ============================================
# Integration Errors
# ============================================

class StorageError(DinTaskError):
    """Storage operation failed"""

    status_code = 502

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_ERROR")


class EmailDeliveryError(DinTaskError):
    status_code = 500

    def __init__(self, message: str = "Email could not be sent"):
        super().__init__(message, code="EMAIL_FAILED")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: DinTaskError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    body: Dict[str, Any] = {
        "success": False,
        "error": error.message,
        "code": error.code,
    }
    if error.details:
        body["details"] = error.details
    if isinstance(error, SubscriptionExpiredError):
        body["subscriptionExpired"] = True
        body["message"] = error.message
        if error.expiry_date:
            body["expiryDate"] = error.expiry_date.isoformat()
    return body
