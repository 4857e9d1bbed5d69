"""LLM relevance scoring with fail-open degradation."""

import asyncio
from typing import List, Optional

from ..config import PipelineConfig
from ..logger import get_logger
from ..models import CandidateItem, ScoredItem
from ..providers import LLMClient, ProviderError, ProviderTransportError
from .responses import RelevanceVerdict, parse_json_array


FAIL_OPEN_SCORE = 0.5

REASON_UNFILTERED = "unfiltered"
REASON_API_ERROR = "api error"
REASON_TRANSPORT_ERROR = "error"
REASON_MALFORMED = "malformed response"
REASON_UNEXPECTED = "unexpected error"


class RelevanceFilter:
    """Scores candidates against the reader's interests and keeps the relevant ones."""

    def __init__(
        self,
        config: PipelineConfig,
        client: Optional[LLMClient] = None,
        max_tokens: int = 1024,
        temperature: float = 0.1
    ):
        """
        Initialize relevance filter.

        Args:
            config: Pipeline configuration (threshold, batch size, interests)
            client: LLM client; None runs the filter in pass-through mode
            max_tokens: Completion budget per batch
            temperature: Sampling temperature
        """
        self.threshold = config.relevance_threshold
        self.batch_size = config.batch_size
        self.interests = config.interests
        self.client = client
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.semaphore = asyncio.Semaphore(config.max_concurrent_requests)
        self.logger = get_logger()

    @property
    def enabled(self) -> bool:
        return self.client is not None and self.client.available

    async def filter(self, candidates: List[CandidateItem]) -> List[ScoredItem]:
        """
        Score candidates and return the passing ones, highest score first.

        Args:
            candidates: Unseen candidates from this run

        Returns:
            Passing ScoredItems; a batch whose scoring failed passes whole at 0.5
        """
        if not candidates:
            return []

        if not self.enabled:
            self.logger.info(f"No scorer configured, passing {len(candidates)} items unfiltered")
            return [self._fail_open(c, REASON_UNFILTERED) for c in candidates]

        batches = [
            candidates[i:i + self.batch_size]
            for i in range(0, len(candidates), self.batch_size)
        ]
        self.logger.info(f"Scoring {len(candidates)} items in {len(batches)} batches")

        batch_results = await asyncio.gather(*(self._score_batch(batch) for batch in batches))

        results = [scored for batch in batch_results for scored in batch]
        results.sort(key=lambda s: s.relevance_score, reverse=True)

        self.logger.info(f"Relevance filter: {len(results)}/{len(candidates)} items passed")
        return results

    async def _score_batch(self, batch: List[CandidateItem]) -> List[ScoredItem]:
        prompt = self._build_prompt(batch)

        async with self.semaphore:
            try:
                text = await self.client.complete(prompt, self.max_tokens, self.temperature)
            except ProviderTransportError as e:
                self.logger.warning(f"Scorer unreachable, batch of {len(batch)} passes unfiltered: {e}")
                return [self._fail_open(c, REASON_TRANSPORT_ERROR) for c in batch]
            except ProviderError as e:
                self.logger.warning(f"Scorer API error, batch of {len(batch)} passes unfiltered: {e}")
                return [self._fail_open(c, REASON_API_ERROR) for c in batch]
            except Exception as e:
                self.logger.error(f"Unexpected scorer failure, batch of {len(batch)} passes unfiltered: {e}")
                return [self._fail_open(c, REASON_UNEXPECTED) for c in batch]

        parsed = parse_json_array(text, RelevanceVerdict)
        if not parsed.ok:
            self.logger.warning(f"Malformed scorer response ({parsed.error}), batch of {len(batch)} passes unfiltered")
            return [self._fail_open(c, REASON_MALFORMED) for c in batch]

        accepted = []
        seen = set()
        for verdict in parsed.entries:
            if not 0 <= verdict.index < len(batch) or verdict.index in seen:
                self.logger.debug(f"Dropping verdict with invalid index {verdict.index}")
                continue
            seen.add(verdict.index)
            if verdict.score < self.threshold:
                continue
            accepted.append(ScoredItem(
                candidate=batch[verdict.index],
                relevance_score=verdict.score,
                relevance_reason=verdict.reason
            ))

        return accepted

    def _build_prompt(self, batch: List[CandidateItem]) -> str:
        if self.interests:
            interests = "\n".join(f"- {interest}" for interest in self.interests)
        else:
            interests = "- Significant technology news"

        articles = "\n".join(
            f"[{i}] {c.title} ({c.source_name}) - {c.raw_content[:300] or 'no description'}"
            for i, c in enumerate(batch)
        )

        return f"""You are filtering news articles for a developer. Score each article 0-1 based on relevance to these interests:
{interests}

Articles to evaluate:
{articles}

Respond with JSON array only, no explanation:
[{{"index": 0, "score": 0.8, "reason": "brief reason"}}, ...]

Only include articles with score >= {self.threshold}"""

    @staticmethod
    def _fail_open(candidate: CandidateItem, reason: str) -> ScoredItem:
        return ScoredItem(candidate=candidate, relevance_score=FAIL_OPEN_SCORE, relevance_reason=reason)
