"""
Error taxonomy shared by the validator, the intake pipeline and the routes.

Every error carries the HTTP status it maps to and a client-safe message.
Upstream and internal failures only ever expose a generic message; the
underlying cause is logged where the error is raised.
"""

from __future__ import annotations

from typing import Optional


class AgencyError(Exception):
    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self) -> dict:
        return {"message": self.message}


class ValidationFailed(AgencyError):
    status_code = 400
    default_message = "Invalid request"

    def __init__(self, field: Optional[str], message: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def as_dict(self) -> dict:
        payload = super().as_dict()
        if self.field:
            payload["field"] = self.field
        return payload


class Conflict(AgencyError):
    status_code = 400
    default_message = "Resource already exists"


class Unauthenticated(AgencyError):
    status_code = 401
    default_message = "No token provided"


class TokenExpired(Unauthenticated):
    default_message = "Token expired"


class TokenInvalid(Unauthenticated):
    default_message = "Invalid token format or signature"


class InvalidCredentials(Unauthenticated):
    default_message = "Invalid credentials"


class NotFound(AgencyError):
    status_code = 404
    default_message = "Not found"


class RateLimited(AgencyError):
    status_code = 429
    default_message = "Too many requests"


class UpstreamFailure(AgencyError):
    """An external collaborator (image host, database) failed."""

    status_code = 500
    default_message = "Server error"


class InternalError(AgencyError):
    status_code = 500
    default_message = "Server error"
