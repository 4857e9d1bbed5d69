"""Tests for the provider layer: selection, registry, fallback client."""

from typing import Dict, Tuple
from unittest.mock import AsyncMock, Mock, patch

import httpx
import openai
import pytest

from news_curator.config import ProviderConfig
from news_curator.providers import (
    AIProvider,
    LLMClient,
    OpenAIProvider,
    ProviderAPIError,
    ProviderConfigError,
    ProviderMetrics,
    ProviderRegistry,
    ProviderSelector,
    ProviderTransportError,
    ProviderUnavailableError
)


def provider_config(provider_id, provider_type="openai", priority=10, enabled=True, **kwargs) -> ProviderConfig:
    return ProviderConfig(
        provider_id=provider_id,
        provider_type=provider_type,
        api_key="test-key",
        model="test-model",
        enabled=enabled,
        priority=priority,
        **kwargs
    )


class ScriptedProvider(AIProvider):
    """Provider double answering from a script of texts or exceptions."""

    def __init__(self, provider_id, *script):
        super().__init__(provider_id, provider_config(provider_id))
        self.script = list(script)
        self.prompts = []

    async def complete_async(self, prompt, max_tokens, temperature) -> Tuple[str, Dict[str, int]]:
        self.prompts.append(prompt)
        outcome = self.script.pop(0)
        if isinstance(outcome, Exception):
            self.metrics.record_failure(str(outcome))
            raise outcome
        self.metrics.record_success(0.1, 10, 5)
        return outcome, {"input_tokens": 10, "output_tokens": 5}

    async def validate_connection(self):
        return True, ""


def make_client(*providers, order=None) -> LLMClient:
    registry = Mock(spec=ProviderRegistry)
    by_id = {p.provider_id: p for p in providers}
    registry.get_all_providers.return_value = by_id
    registry.get_provider.side_effect = lambda pid: by_id[pid]
    selector = Mock(spec=ProviderSelector)
    selector.get_provider_chain.return_value = order or [p.provider_id for p in providers]
    return LLMClient(registry, selector)


class TestProviderSelector:
    """Test provider ordering strategies."""

    def test_priority_strategy(self):
        configs = [provider_config("low", priority=10), provider_config("high", priority=1)]
        assert ProviderSelector(configs, "priority").get_provider_chain() == ["high", "low"]

    def test_cost_strategy(self):
        configs = [
            provider_config("expensive", priority=1, input_cost_per_1M_tokens=10.0, output_cost_per_1M_tokens=30.0),
            provider_config("cheap", priority=2, input_cost_per_1M_tokens=0.5, output_cost_per_1M_tokens=1.5),
        ]
        assert ProviderSelector(configs, "cost").get_provider_chain() == ["cheap", "expensive"]

    def test_disabled_excluded(self):
        configs = [provider_config("on", priority=1), provider_config("off", priority=0, enabled=False)]
        assert ProviderSelector(configs).get_provider_chain() == ["on"]

    def test_chain_is_a_copy(self):
        selector = ProviderSelector([provider_config("a")])
        selector.get_provider_chain().append("b")
        assert selector.get_provider_chain() == ["a"]


class TestProviderRegistry:
    """Test provider construction."""

    def test_builds_known_types(self):
        registry = ProviderRegistry([
            provider_config("groq", "openai", base_url="https://api.groq.com/openai/v1"),
            provider_config("claude", "anthropic"),
            provider_config("off", "openai", enabled=False),
        ])

        providers = registry.get_all_providers()
        assert set(providers) == {"groq", "claude"}
        assert isinstance(providers["groq"], OpenAIProvider)

    def test_unknown_type(self):
        with pytest.raises(ProviderConfigError, match="Unknown provider type"):
            ProviderRegistry([provider_config("x", "palm")])

    def test_missing_provider(self):
        with pytest.raises(ProviderConfigError, match="not found"):
            ProviderRegistry([]).get_provider("ghost")


class TestLLMClient:
    """Test fallback across the provider chain."""

    @pytest.mark.asyncio
    async def test_first_provider_answers(self):
        primary = ScriptedProvider("primary", "[1]")
        backup = ScriptedProvider("backup", "[2]")

        assert await make_client(primary, backup).complete("prompt") == "[1]"
        assert backup.prompts == []

    @pytest.mark.asyncio
    async def test_falls_back_on_error(self):
        primary = ScriptedProvider("primary", ProviderTransportError("down"))
        backup = ScriptedProvider("backup", "[2]")
        client = make_client(primary, backup)

        assert await client.complete("prompt") == "[2]"
        assert client.total_input_tokens == 10

    @pytest.mark.asyncio
    async def test_raises_last_error_when_all_fail(self):
        primary = ScriptedProvider("primary", ProviderTransportError("down"))
        backup = ScriptedProvider("backup", ProviderAPIError("429"))

        with pytest.raises(ProviderAPIError, match="429"):
            await make_client(primary, backup).complete("prompt")

    @pytest.mark.asyncio
    async def test_no_providers(self):
        client = make_client()
        assert client.available is False
        with pytest.raises(ProviderUnavailableError):
            await client.complete("prompt")

    @pytest.mark.asyncio
    async def test_degraded_provider_tried_last(self):
        flaky = ScriptedProvider("flaky", "[flaky]")
        for _ in range(3):
            flaky.metrics.record_failure("timeout")
        steady = ScriptedProvider("steady", "[steady]")

        assert await make_client(flaky, steady).complete("prompt") == "[steady]"
        assert flaky.prompts == []

    def test_from_config_without_providers(self):
        config = Mock(providers=[], provider_strategy="priority")
        assert LLMClient.from_config(config).available is False


class TestProviderMetrics:
    def test_degraded_after_consecutive_failures(self):
        metrics = ProviderMetrics("p")
        metrics.record_failure("a")
        metrics.record_failure("b")
        assert metrics.is_degraded() is False
        metrics.record_failure("c")
        assert metrics.is_degraded() is True
        assert metrics.to_dict()["last_error"] == "c"

        metrics.record_success(0.2, 1, 1)
        assert metrics.is_degraded() is False
        assert metrics.success_rate() == 0.25


class TestOpenAIProvider:
    """Test SDK error mapping."""

    @pytest.fixture
    def provider(self):
        return OpenAIProvider("groq", provider_config("groq", base_url="https://api.groq.com/openai/v1"))

    @pytest.mark.asyncio
    async def test_returns_text_and_usage(self, provider):
        response = Mock()
        response.choices = [Mock(message=Mock(content="[]"))]
        response.usage = Mock(prompt_tokens=12, completion_tokens=3)

        with patch.object(provider.client.chat.completions, "create", AsyncMock(return_value=response)):
            text, usage = await provider.complete_async("prompt", 100, 0.1)

        assert text == "[]"
        assert usage == {"input_tokens": 12, "output_tokens": 3}
        assert provider.metrics.successful_requests == 1

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self, provider):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        error = openai.APIConnectionError(request=request)

        with patch.object(provider.client.chat.completions, "create", AsyncMock(side_effect=error)):
            with pytest.raises(ProviderTransportError):
                await provider.complete_async("prompt", 100, 0.1)

        assert provider.metrics.failed_requests == 1

    @pytest.mark.asyncio
    async def test_status_error_is_api_error(self, provider):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        response = httpx.Response(500, request=request)
        error = openai.InternalServerError("server error", response=response, body=None)

        with patch.object(provider.client.chat.completions, "create", AsyncMock(side_effect=error)):
            with pytest.raises(ProviderAPIError):
                await provider.complete_async("prompt", 100, 0.1)

    @pytest.mark.asyncio
    async def test_validate_connection_reports_failure(self, provider):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        error = openai.APIConnectionError(request=request)

        with patch.object(provider.client.chat.completions, "create", AsyncMock(side_effect=error)):
            is_healthy, message = await provider.validate_connection()

        assert is_healthy is False
        assert message == "Connection error."


class TestProviderHealth:
    """Test registry-wide connectivity checks."""

    @pytest.mark.asyncio
    async def test_validate_all(self):
        registry = ProviderRegistry([provider_config("groq"), provider_config("claude", "anthropic")])
        groq = registry.get_provider("groq")
        claude = registry.get_provider("claude")

        with patch.object(groq, "validate_connection", AsyncMock(return_value=(True, ""))), \
                patch.object(claude, "validate_connection", AsyncMock(return_value=(False, "401"))):
            results = await registry.validate_all()

        assert results == {"groq": (True, ""), "claude": (False, "401")}
