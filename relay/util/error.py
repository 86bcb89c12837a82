"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Raised at startup when required settings are missing or invalid."""

    pass


class DependencyInjectionError(UtilError):
    """Raised when no provider implementation matches a component request."""

    pass
