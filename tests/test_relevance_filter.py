"""Tests for LLM relevance filtering."""

import json

import pytest

from news_curator.config import PipelineConfig
from news_curator.processing.relevance_filter import RelevanceFilter
from news_curator.processing.responses import RelevanceVerdict, parse_json_array
from news_curator.providers import (
    ProviderAPIError,
    ProviderTransportError
)

from conftest import make_candidate


def verdicts(*entries) -> str:
    return json.dumps([{"index": i, "score": s, "reason": r} for i, s, r in entries])


class TestParseResponse:
    """Test structured parsing of scorer output."""

    def test_extracts_array_from_prose(self):
        text = "Here you go:\n```json\n" + verdicts((0, 0.9, "AI")) + "\n```"
        result = parse_json_array(text, RelevanceVerdict)
        assert result.ok
        assert result.entries[0].score == 0.9

    @pytest.mark.parametrize("text", [
        "",
        None,
        "no array here",
        "[{\"index\": 0, \"score\": }]",
        "[{\"index\": 0, \"score\": 1.5}]",
        "[{\"score\": 0.7}]",
    ])
    def test_malformed(self, text):
        result = parse_json_array(text, RelevanceVerdict)
        assert result.ok is False
        assert result.error


class TestRelevanceFilter:
    """Test scoring, thresholds and fail-open degradation."""

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_call(self, pipeline_config, llm_client):
        rf = RelevanceFilter(pipeline_config, llm_client)
        assert await rf.filter([]) == []
        llm_client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_client_passes_unfiltered(self, pipeline_config):
        candidates = [make_candidate(n) for n in range(3)]
        result = await RelevanceFilter(pipeline_config, None).filter(candidates)

        assert [s.candidate for s in result] == candidates
        assert all(s.relevance_score == 0.5 for s in result)
        assert all(s.relevance_reason == "unfiltered" for s in result)

    @pytest.mark.asyncio
    async def test_unavailable_client_passes_unfiltered(self, pipeline_config, llm_client):
        llm_client.available = False
        result = await RelevanceFilter(pipeline_config, llm_client).filter([make_candidate(1)])

        assert result[0].relevance_reason == "unfiltered"
        llm_client.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_threshold_boundary(self, pipeline_config, llm_client):
        llm_client.complete.return_value = verdicts(
            (0, 0.5, "exactly at threshold"),
            (1, 0.499, "just below"),
            (2, 0.95, "very relevant"),
        )
        candidates = [make_candidate(n) for n in range(3)]

        result = await RelevanceFilter(pipeline_config, llm_client).filter(candidates)

        assert [s.identifier for s in result] == [
            candidates[2].identifier,
            candidates[0].identifier,
        ]
        assert result[0].relevance_reason == "very relevant"

    @pytest.mark.asyncio
    async def test_out_of_range_index_dropped(self, pipeline_config, llm_client):
        llm_client.complete.return_value = verdicts((0, 0.8, "ok"), (5, 0.9, "bogus"), (-1, 0.9, "bogus"))
        result = await RelevanceFilter(pipeline_config, llm_client).filter([make_candidate(0)])

        assert len(result) == 1
        assert result[0].relevance_score == 0.8

    @pytest.mark.asyncio
    async def test_duplicate_index_keeps_first_verdict(self, pipeline_config, llm_client):
        llm_client.complete.return_value = verdicts((0, 0.2, "weak"), (0, 0.9, "dup"), (1, 0.7, "ok"), (1, 0.95, "dup"))
        candidates = [make_candidate(0), make_candidate(1)]

        result = await RelevanceFilter(pipeline_config, llm_client).filter(candidates)

        assert [(r.identifier, r.relevance_score, r.relevance_reason) for r in result] == [
            (candidates[1].identifier, 0.7, "ok")
        ]

    @pytest.mark.asyncio
    async def test_omitted_items_are_rejected(self, pipeline_config, llm_client):
        llm_client.complete.return_value = verdicts((1, 0.7, "ok"))
        candidates = [make_candidate(n) for n in range(3)]

        result = await RelevanceFilter(pipeline_config, llm_client).filter(candidates)

        assert [s.candidate for s in result] == [candidates[1]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error, reason", [
        (ProviderAPIError("500 from provider"), "api error"),
        (ProviderTransportError("connection reset"), "error"),
        (RuntimeError("boom"), "unexpected error"),
    ])
    async def test_failures_fail_open(self, pipeline_config, llm_client, error, reason):
        llm_client.complete.side_effect = error
        candidates = [make_candidate(n) for n in range(4)]

        result = await RelevanceFilter(pipeline_config, llm_client).filter(candidates)

        assert [s.candidate for s in result] == candidates
        assert all(s.relevance_score == 0.5 for s in result)
        assert all(s.relevance_reason == reason for s in result)

    @pytest.mark.asyncio
    async def test_malformed_response_fails_open(self, pipeline_config, llm_client):
        llm_client.complete.return_value = "I think they are all great!"
        candidates = [make_candidate(n) for n in range(2)]

        result = await RelevanceFilter(pipeline_config, llm_client).filter(candidates)

        assert len(result) == 2
        assert all(s.relevance_reason == "malformed response" for s in result)

    @pytest.mark.asyncio
    async def test_batches_fail_independently(self, llm_client):
        config = PipelineConfig(batch_size=2, interests=["AI"])
        candidates = [make_candidate(n) for n in range(4)]
        llm_client.complete.side_effect = [
            verdicts((0, 0.9, "good")),
            ProviderAPIError("rate limited"),
        ]

        result = await RelevanceFilter(config, llm_client).filter(candidates)

        assert llm_client.complete.await_count == 2
        assert result[0].candidate == candidates[0]
        assert result[0].relevance_score == 0.9
        assert [s.candidate for s in result[1:]] == candidates[2:]
        assert all(s.relevance_reason == "api error" for s in result[1:])

    @pytest.mark.asyncio
    async def test_results_sorted_by_score_stable(self, llm_client):
        config = PipelineConfig(batch_size=3)
        candidates = [make_candidate(n) for n in range(3)]
        llm_client.complete.return_value = verdicts((0, 0.6, "a"), (1, 0.9, "b"), (2, 0.6, "c"))

        result = await RelevanceFilter(config, llm_client).filter(candidates)

        assert [s.candidate for s in result] == [candidates[1], candidates[0], candidates[2]]

    @pytest.mark.asyncio
    async def test_prompt_contents(self, pipeline_config, llm_client):
        candidate = make_candidate(1, content="x" * 500, source="Lobsters")
        await RelevanceFilter(pipeline_config, llm_client).filter([candidate])

        prompt = llm_client.complete.call_args[0][0]
        assert "- AI/LLM developments" in prompt
        assert "[0] Article 1 (Lobsters) - " + "x" * 300 in prompt
        assert "x" * 301 not in prompt
