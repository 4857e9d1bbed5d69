"""Custom exceptions for AI provider operations."""


class ProviderError(Exception):
    """Base class for provider failures."""
    pass


class ProviderAPIError(ProviderError):
    """Raised when a provider answered with a non-success response."""
    pass


class ProviderTransportError(ProviderError):
    """Raised when a provider could not be reached (network error, timeout)."""
    pass


class ProviderUnavailableError(ProviderError):
    """Raised when no provider is configured."""
    pass


class ProviderConfigError(Exception):
    """Raised when provider configuration is invalid."""
    pass
