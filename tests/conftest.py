"""Shared fixtures for the curator test suite."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from news_curator.config import PipelineConfig, SummarizationConfig
from news_curator.history import HistoryStore
from news_curator.models import CandidateItem, ScoredItem
from news_curator.providers import LLMClient


def make_candidate(n, source="Example Feed", category="tech", content=None, title=None):
    """Candidate with a unique identifier derived from n."""
    return CandidateItem(
        identifier=f"https://example.com/articles/{n}",
        title=title or f"Article {n}",
        source_name=source,
        category=category,
        raw_content=content if content is not None else ""
    )


def make_scored(n, score=0.8, **kwargs):
    return ScoredItem(candidate=make_candidate(n, **kwargs), relevance_score=score, relevance_reason="test")


@pytest.fixture
def history():
    """In-memory history store, closed after the test."""
    store = HistoryStore(":memory:").open()
    yield store
    store.close()


@pytest.fixture
def llm_client():
    """LLM client double; set `complete.return_value` or `side_effect` per test."""
    client = Mock(spec=LLMClient)
    client.available = True
    client.complete = AsyncMock(return_value="[]")
    return client


@pytest.fixture
def pipeline_config():
    return PipelineConfig(interests=["AI/LLM developments", "Developer tools"])


@pytest.fixture
def summarization_config():
    return SummarizationConfig(output_language="English", exempt_categories=["tech-jp"])


def mock_transport(handler):
    """Patch httpx.AsyncClient so every client created uses a MockTransport."""
    real_client = httpx.AsyncClient

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    return patch("httpx.AsyncClient", side_effect=factory)
