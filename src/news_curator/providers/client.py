"""Completion client that walks the provider chain with fallback."""

from typing import List, Optional

from ..config import Config
from ..logger import get_logger
from .registry import ProviderRegistry
from .selector import ProviderSelector
from .exceptions import ProviderError, ProviderUnavailableError


class LLMClient:
    """Sends prompts to the first provider in the chain that answers."""

    def __init__(self, registry: ProviderRegistry, selector: ProviderSelector):
        self.registry = registry
        self.selector = selector
        self.logger = get_logger()
        self.total_input_tokens = 0
        self.total_output_tokens = 0

    @classmethod
    def from_config(cls, config: Config) -> 'LLMClient':
        return cls(
            ProviderRegistry(config.providers),
            ProviderSelector(config.providers, config.provider_strategy)
        )

    @property
    def available(self) -> bool:
        """True when at least one provider is registered."""
        return bool(self._chain())

    def _chain(self) -> List[str]:
        registered = self.registry.get_all_providers()
        chain = [pid for pid in self.selector.get_provider_chain() if pid in registered]
        # Providers failing repeatedly are tried last
        healthy = [pid for pid in chain if not registered[pid].metrics.is_degraded()]
        degraded = [pid for pid in chain if registered[pid].metrics.is_degraded()]
        return healthy + degraded

    async def complete(self, prompt: str, max_tokens: int = 1024, temperature: float = 0.1) -> str:
        """
        Return the text of the first successful completion.

        Raises:
            ProviderUnavailableError: If no provider is configured
            ProviderError: The last provider's error when every provider failed
        """
        chain = self._chain()
        if not chain:
            raise ProviderUnavailableError("No AI provider configured")

        last_error: Optional[ProviderError] = None
        for provider_id in chain:
            provider = self.registry.get_provider(provider_id)
            try:
                text, usage = await provider.complete_async(prompt, max_tokens, temperature)
            except ProviderError as e:
                self.logger.warning(f"Provider {provider_id} failed: {e}")
                last_error = e
                continue

            self.total_input_tokens += usage.get("input_tokens", 0)
            self.total_output_tokens += usage.get("output_tokens", 0)
            self.logger.debug(f"Completion served by {provider_id}")
            return text

        self.logger.error(f"All {len(chain)} providers failed")
        raise last_error

    def log_usage_summary(self) -> None:
        """Log provider usage statistics."""
        self.logger.info(
            f"LLM usage: {self.total_input_tokens} input tokens, "
            f"{self.total_output_tokens} output tokens"
        )
        for provider_id, provider in self.registry.get_all_providers().items():
            stats = provider.get_usage_stats()
            self.logger.info(
                f"  {provider_id}: {stats['successful_requests']}/{stats['total_requests']} successful, "
                f"{stats['average_latency_seconds']:.2f}s avg latency"
            )
