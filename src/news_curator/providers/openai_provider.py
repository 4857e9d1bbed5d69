"""OpenAI-compatible API provider implementation (OpenAI, Groq, Azure)."""

import asyncio
import time
from typing import Dict, Tuple

from openai import AsyncOpenAI
from openai import APIConnectionError, APIStatusError, RateLimitError

from ..config import ProviderConfig
from .base import AIProvider
from .exceptions import ProviderAPIError, ProviderTransportError


class OpenAIProvider(AIProvider):
    """Chat-completions provider for any OpenAI-compatible endpoint."""

    def __init__(self, provider_id: str, config: ProviderConfig):
        """
        Initialize OpenAI provider.

        Args:
            provider_id: Unique identifier for this provider
            config: Provider configuration; set base_url for Groq or Azure
        """
        super().__init__(provider_id, config)

        client_kwargs = {"api_key": config.api_key}
        if config.base_url:
            client_kwargs["base_url"] = config.base_url

        self.client = AsyncOpenAI(**client_kwargs)
        self.model = config.model
        self.timeout = config.timeout

    async def complete_async(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float
    ) -> Tuple[str, Dict[str, int]]:
        """
        Send a prompt to the chat completions endpoint.

        Returns:
            Tuple of (response_text, usage_dict)

        Raises:
            ProviderAPIError: On error status (after rate-limit retries)
            ProviderTransportError: On connection failure or timeout
        """
        start_time = time.time()

        for attempt in range(3):  # Max 3 retries
            try:
                response = await self.client.chat.completions.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[{"role": "user", "content": prompt}],
                    timeout=self.timeout
                )

                text = ""
                if response.choices:
                    text = response.choices[0].message.content or ""

                input_tokens = response.usage.prompt_tokens if response.usage else 0
                output_tokens = response.usage.completion_tokens if response.usage else 0

                latency = time.time() - start_time
                self.metrics.record_success(latency, input_tokens, output_tokens)

                usage = {
                    "input_tokens": input_tokens,
                    "output_tokens": output_tokens
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
                raise ProviderTransportError(f"Could not reach {self.provider_id}: {e}")

            except APIStatusError as e:
                self.metrics.record_failure(str(e))
                raise ProviderAPIError(f"{self.provider_id} API error ({e.status_code}): {e}")

        raise ProviderAPIError("Failed to complete after maximum retries")

    async def validate_connection(self) -> Tuple[bool, str]:
        """
        Test API connectivity.

        Returns:
            Tuple of (is_healthy, error_message)
        """
        try:
            await self.client.chat.completions.create(
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "test"}],
                timeout=10  # Short timeout for health check
            )
            return True, ""
        except Exception as e:
            return False, str(e)
