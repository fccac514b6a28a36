from importlib.metadata import PackageNotFoundError, version  # pragma: no cover

try:
    # Change here if project is renamed and does not equal the package name
    dist_name = "gliderecord"
    __version__ = version(dist_name)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"
finally:
    del version, PackageNotFoundError

from .access import GlideAccess, GlideConfig  # noqa: E402
from .exceptions import (  # noqa: E402
    AccessError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    GlideError,
    MissingCredentialsError,
    NotInitializedError,
    PreconditionError,
    ProtocolError,
    QueryError,
    ValidationError,
)
from .record import GlideRecord, GlideRow  # noqa: E402

__all__ = [
    "GlideAccess",
    "GlideConfig",
    "GlideRecord",
    "GlideRow",
    "GlideError",
    "AccessError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "MissingCredentialsError",
    "NotInitializedError",
    "PreconditionError",
    "ProtocolError",
    "QueryError",
    "ValidationError",
]
