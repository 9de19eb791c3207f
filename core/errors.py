"""
Domain error hierarchy.

Services and the matching core raise these; the error handlers in
core.middleware.error_handling translate them into HTTP responses.
"""

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for expected business-rule failures."""

    status_code: int = 400
    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Input violates a business rule. Carries the offending field."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DomainError):
    """Uniqueness or concurrent-modification conflict."""

    status_code = 409
    code = "CONFLICT"


class AuthorizationError(DomainError):
    """Actor may not perform this operation."""

    status_code = 403
    code = "FORBIDDEN"


class LimitExceededError(DomainError):
    """Monthly quota exhausted."""

    status_code = 429
    code = "LIMIT_EXCEEDED"

    def __init__(self, message: str, limit: int, used: int):
        super().__init__(message, {"limit": limit, "used": used})
        self.limit = limit
        self.used = used
