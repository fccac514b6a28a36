from __future__ import annotations

from typing import Optional


class GlideError(RuntimeError):
    """Base class for everything raised by gliderecord."""


class ConfigurationError(GlideError):
    """Raised when the instance URL or credentials cannot be used."""


class MissingCredentialsError(ConfigurationError):
    """Raised when the required GLIDE_* env vars are not present."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("Missing required environment variables: " + ", ".join(missing))


class NotInitializedError(GlideError):
    """Raised when a record is created before GlideAccess.init() was called."""


class ValidationError(GlideError):
    """Raised for malformed table names, column names, sys_ids or limits."""


class QueryError(GlideError):
    """Raised when query() is called without any clauses."""


class AccessError(GlideError):
    """Raised for an unexpected HTTP status or a failed request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(AccessError):
    """HTTP 401: the username/password pair was rejected."""

    def __init__(self, message: str = "Access denied - check the username and password"):
        super().__init__(message, status_code=401)


class AuthorizationError(AccessError):
    """HTTP 403: the user lacks the ACL for this operation."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, status_code=403)


class ProtocolError(GlideError):
    """Raised when a response body is not a {"result": ...} JSON envelope."""


class PreconditionError(GlideError):
    """Raised when update() runs on a row without a usable sys_id."""
