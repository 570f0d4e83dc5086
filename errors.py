"""
Exceptions for the portfolio admin backend
==========================================

Services raise these; the exception handlers in ``main`` turn them into the
``{"success": false, "error": ...}`` envelope with the matching status code.

Usage:
    from errors import NotFoundError

    if lookup.outcome is LookupOutcome.NOT_FOUND:
        raise NotFoundError("Project", key)
"""

from typing import Any, Dict, List, Optional


class PortfolioError(Exception):
    """Base exception for all portfolio backend errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.message, "code": self.code}
        body.update(self.details)
        return body


# ============================================
# 400
# ============================================

class ValidationError(PortfolioError):
    """Missing or malformed input"""

    status_code = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        details = {"fields": fields} if fields else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


# ============================================
# 401
# ============================================

class AuthenticationError(PortfolioError):
    """Submitted credentials did not match"""

    status_code = 401

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(PortfolioError):
    """No valid token on a protected route.

    ``redirect_to`` is set for page routes. ``delete_cookie`` holds the
    ``Response.delete_cookie`` arguments when an invalid or expired token was
    presented and the client has to drop it.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Not authenticated",
        redirect_to: Optional[str] = None,
        delete_cookie: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code="NOT_AUTHORIZED")
        self.redirect_to = redirect_to
        self.delete_cookie = delete_cookie


# ============================================
# 404
# ============================================

class NotFoundError(PortfolioError):
    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ============================================
# 5xx
# ============================================

class ServiceUnavailableError(PortfolioError):
    """Database not connected at call time"""

    status_code = 503

    def __init__(self, message: str = "Database is not connected"):
        super().__init__(message, code="SERVICE_UNAVAILABLE")


class InternalError(PortfolioError):
    """Unexpected failure; the real cause is only logged"""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")
