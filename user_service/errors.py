"""
Exception hierarchy for the User Service.

Every failure raised on the write path derives from ``ServiceError`` so the
HTTP layer can map it to a generic 500 response.
"""


class ServiceError(Exception):
    """Base class for all service errors."""


class ConfigError(ServiceError):
    """Missing or invalid configuration at startup."""


class DatabaseConnectionError(ServiceError):
    """The store is unreachable or the connection pool is exhausted."""


class StorageError(ServiceError):
    """A statement failed: constraint violation or dropped connection."""
