"""
Custom Exceptions for the Student Portal
========================================

Endpoints raise these instead of building error responses by hand. The
handlers registered in ``portal.main`` turn them into ``{"error": ...}``
JSON bodies with the matching HTTP status.

Usage:
    from portal.core.exceptions import ResourceNotFoundError

    if not job:
        raise ResourceNotFoundError("Job")
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all portal errors"""

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
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# ============================================
# Authentication & Authorization Errors
# ============================================

class UnauthorizedError(PortalError):
    """No session, or the session has expired"""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(PortalError):
    """Valid session without the required privilege"""

    status_code = 403

    def __init__(self, message: str = "Forbidden: Admin access required"):
        super().__init__(message, code="FORBIDDEN")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(PortalError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Optional[str] = None):
        details = {"resource_type": resource_type}
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details=details
        )


class StudentNotFoundError(ResourceNotFoundError):
    """Subject behind a phone number or id does not exist"""

    def __init__(self, student_id: Optional[str] = None):
        super().__init__("Student", student_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(PortalError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidOrExpiredCodeError(ValidationError):
    """One-time code does not match, was already used, or expired"""

    def __init__(self):
        super().__init__("Invalid or expired code", field="code")
        self.code = "INVALID_OR_EXPIRED_CODE"
