"""Provider selection strategy."""

from typing import List

from ..config import ProviderConfig


class ProviderSelector:
    """Orders providers according to the configured strategy."""

    def __init__(self, provider_configs: List[ProviderConfig], strategy: str = "priority"):
        """
        Initialize provider selector.

        Args:
            provider_configs: List of provider configurations
            strategy: Selection strategy ("priority" or "cost")
        """
        self.strategy = strategy
        self.provider_order = self._build_provider_order(provider_configs)

    def _build_provider_order(self, configs: List[ProviderConfig]) -> List[str]:
        """
        Build ordered list of provider IDs based on strategy.

        Args:
            configs: List of provider configurations

        Returns:
            Ordered list of enabled provider IDs
        """
        enabled_configs = [c for c in configs if c.enabled]

        if self.strategy == "cost":
            # Cheapest first, priority breaks ties
            enabled_configs.sort(key=lambda c: (c.estimated_cost_per_request(), c.priority))
        else:
            # Lower number = higher priority
            enabled_configs.sort(key=lambda c: c.priority)

        return [c.provider_id for c in enabled_configs]

    def get_provider_chain(self) -> List[str]:
        """Return the ordered provider IDs to try (a copy)."""
        return self.provider_order.copy()
