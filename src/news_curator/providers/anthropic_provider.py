"""Anthropic Claude API provider implementation."""

import asyncio
import time
from typing import Dict, Tuple

from anthropic import AsyncAnthropic
from anthropic import APIConnectionError, APIStatusError, RateLimitError

from ..config import ProviderConfig
from .base import AIProvider
from .exceptions import ProviderAPIError, ProviderTransportError


class AnthropicProvider(AIProvider):
    """Anthropic Claude API provider."""

    def __init__(self, provider_id: str, config: ProviderConfig):
        """
        Initialize Anthropic provider.

        Args:
            provider_id: Unique identifier for this provider
            config: Provider configuration
        """
        super().__init__(provider_id, config)

        client_kwargs = {"api_key": config.api_key}
        if config.base_url:
            client_kwargs["base_url"] = config.base_url

        self.client = AsyncAnthropic(**client_kwargs)
        self.model = config.model
        self.timeout = config.timeout

    async def complete_async(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float
    ) -> Tuple[str, Dict[str, int]]:
        """
        Send a prompt to the Anthropic Messages API.

        Returns:
            Tuple of (response_text, usage_dict)

        Raises:
            ProviderAPIError: On error status (after rate-limit retries)
            ProviderTransportError: On connection failure or timeout
        """
        start_time = time.time()

        for attempt in range(3):  # Max 3 retries
            try:
                response = await self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "user", "content": prompt}],
                    timeout=self.timeout
                )

                text = "".join(
                    block.text for block in response.content if getattr(block, "type", "") == "text"
                )

                latency = time.time() - start_time
                self.metrics.record_success(
                    latency,
                    response.usage.input_tokens,
                    response.usage.output_tokens
                )

                usage = {
                    "input_tokens": response.usage.input_tokens,
                    "output_tokens": response.usage.output_tokens
                }

                return text, usage

            except RateLimitError as e:
                wait_time = 2 ** attempt  # Exponential backoff: 1s, 2s, 4s
                if attempt < 2:
                    await asyncio.sleep(wait_time)
                else:
                    self.metrics.record_failure(str(e))
                    raise ProviderAPIError(f"Rate limit exceeded after {attempt + 1} attempts: {e}")

            except APIConnectionError as e:
                self.metrics.record_failure(str(e))
                raise ProviderTransportError(f"Could not reach Anthropic API: {e}")

            except APIStatusError as e:
                self.metrics.record_failure(str(e))
                raise ProviderAPIError(f"Anthropic API error ({e.status_code}): {e}")

        raise ProviderAPIError("Failed to complete after maximum retries")

    async def validate_connection(self) -> Tuple[bool, str]:
        """
        Test Anthropic API connectivity.

        Returns:
            Tuple of (is_healthy, error_message)
        """
        try:
            await self.client.messages.create(
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "test"}],
                timeout=10  # Short timeout for health check
            )
            return True, ""
        except Exception as e:
            return False, str(e)
