"""AI provider abstraction layer."""

from .exceptions import (
    ProviderError,
    ProviderAPIError,
    ProviderTransportError,
    ProviderUnavailableError,
    ProviderConfigError,
)
from .metrics import ProviderMetrics
from .base import AIProvider
from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider
from .registry import ProviderRegistry
from .selector import ProviderSelector
from .client import LLMClient

__all__ = [
    "ProviderError",
    "ProviderAPIError",
    "ProviderTransportError",
    "ProviderUnavailableError",
    "ProviderConfigError",
    "ProviderMetrics",
    "AIProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "ProviderRegistry",
    "ProviderSelector",
    "LLMClient",
]
