"""Exception types raised by the catalog engine."""

__all__ = ["CatalogError", "SchemaError", "ConfigurationError", "ExternalServiceError"]


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class SchemaError(CatalogError):
    """Raised when a column the operation depends on is missing."""
    pass


class ConfigurationError(CatalogError):
    """Raised for configuration values outside their domain."""
    pass


class ExternalServiceError(CatalogError):
    """Raised when the image store or a URL probe fails."""
    pass
