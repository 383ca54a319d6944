"""
Error taxonomy for the Strategic Planning backend.

Every error raised by the services carries a stable ``code`` for programmatic
handling, a human-readable ``message`` and the HTTP status the API layer maps
it to. ``ResolutionError`` is the exception: it never leaves the relationship
resolver.
"""

from typing import Any, Dict, Optional


class PlanningError(Exception):
    """
    Base class for all domain errors.

    Attributes:
        code: Stable error code for programmatic handling
        message: Human-readable error description
        status_code: HTTP status the API layer responds with
    """

    code = "ERROR"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(f"{self.code}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "success": False,
            "message": self.message,
            "error": self.code,
        }


class ValidationError(PlanningError):
    """Malformed or missing required field, bad date or number."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthenticationError(PlanningError):
    """Missing, expired or malformed credential."""

    code = "UNAUTHENTICATED"
    status_code = 401


class TokenExpiredError(AuthenticationError):
    code = "TOKEN_EXPIRED"


class TokenMalformedError(AuthenticationError):
    code = "TOKEN_MALFORMED"


class AuthorizationError(PlanningError):
    """Valid actor, insufficient role or not the owner."""

    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str, reason: str = "forbidden"):
        self.reason = reason
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


class NotFoundError(PlanningError):
    """Id has no live record."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, record_id: str):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} '{record_id}' not found")


class ConflictError(PlanningError):
    """Unique constraint violation (e.g. duplicate email)."""

    code = "CONFLICT"
    status_code = 409


class StorageError(PlanningError):
    """Underlying store unavailable or query failed."""

    code = "STORAGE_ERROR"
    status_code = 500


class ResolutionError(PlanningError):
    """Association hydration failed. Always recovered by the resolver."""

    code = "RESOLUTION_ERROR"
    status_code = 500
