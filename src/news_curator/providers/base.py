"""Abstract base class for AI providers."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple

from ..config import ProviderConfig
from .metrics import ProviderMetrics


class AIProvider(ABC):
    """Abstract base class for AI API providers."""

    def __init__(self, provider_id: str, config: ProviderConfig):
        """
        Initialize provider.

        Args:
            provider_id: Unique identifier for this provider instance
            config: Provider configuration
        """
        self.provider_id = provider_id
        self.config = config
        self.metrics = ProviderMetrics(provider_id)

    @abstractmethod
    async def complete_async(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float
    ) -> Tuple[str, Dict[str, int]]:
        """
        Send a single-turn prompt and return the model's text.

        Args:
            prompt: Complete user prompt
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (0.0-1.0)

        Returns:
            Tuple of (response_text, usage_dict)
            usage_dict contains 'input_tokens' and 'output_tokens'

        Raises:
            ProviderAPIError: If the API answered with an error status
            ProviderTransportError: If the API could not be reached
        """
        pass

    @abstractmethod
    async def validate_connection(self) -> Tuple[bool, str]:
        """
        Test provider API connectivity.

        Returns:
            Tuple of (is_healthy, error_message)
            error_message is empty string if healthy
        """
        pass

    def get_usage_stats(self) -> Dict:
        """Return provider metrics."""
        return self.metrics.to_dict()
