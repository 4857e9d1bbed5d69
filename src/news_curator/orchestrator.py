"""Pipeline orchestrator: intake, dedupe, filter, select, summarize, persist."""

import asyncio
from typing import List, Optional, Tuple

from .config import Config, PipelineConfig
from .models import CandidateItem, CuratedItem, HistoryRecord, RunResult, ScoredItem
from .history import HistoryStore
from .fetchers import MultiSourceFetcher, SourceConnector, build_sources
from .processing import QualityGatedSummarizer, RelevanceFilter, select
from .providers import LLMClient
from .logger import get_logger


class CurationPipeline:
    """
    Produces one curated batch per run.

    Every candidate that survives dedupe is recorded in the history store
    as undelivered, whether or not it is selected. Delivery and marking
    items delivered belong to the caller.
    """

    def __init__(
        self,
        sources: List[SourceConnector],
        history: HistoryStore,
        relevance_filter: RelevanceFilter,
        summarizer: QualityGatedSummarizer,
        config: PipelineConfig
    ):
        """
        Initialize curation pipeline.

        Args:
            sources: Source connectors in priority order
            history: Open history store
            relevance_filter: Relevance scorer
            summarizer: Gloss generator
            config: Intake and output limits
        """
        self.fetcher = MultiSourceFetcher(sources)
        self.history = history
        self.relevance_filter = relevance_filter
        self.summarizer = summarizer
        self.config = config
        self.logger = get_logger()
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls,
        config: Config,
        history: HistoryStore,
        client: Optional[LLMClient] = None
    ) -> 'CurationPipeline':
        """Build the pipeline and its components from application configuration."""
        if client is None:
            client = LLMClient.from_config(config)

        summ = config.summarization
        return cls(
            sources=build_sources(config),
            history=history,
            relevance_filter=RelevanceFilter(
                config.pipeline, client, summ.max_tokens, summ.temperature
            ),
            summarizer=QualityGatedSummarizer(
                summ, client, max_concurrent_requests=config.pipeline.max_concurrent_requests
            ),
            config=config.pipeline
        )

    async def run(self) -> RunResult:
        """
        Execute one run.

        Returns:
            RunResult with the curated batch; empty when nothing new was found

        Raises:
            StorageError: If the history store fails at any point
        """
        async with self._lock:
            return await self._run()

    async def _run(self) -> RunResult:
        self.logger.info("=" * 70)
        self.logger.info("Starting curation run")
        self.logger.info("=" * 70)

        result = RunResult()

        # Stage 1: Intake
        fetched = await self.fetcher.fetch_all()
        result.errors.extend(self.fetcher.errors)
        result.fetched = sum(len(items) for _, items in fetched)

        # Stage 2: Dedupe
        candidates = self._dedupe(fetched)
        result.candidates = candidates
        self.logger.info(f"Dedupe: {len(candidates)} new of {result.fetched} fetched")

        if not candidates:
            self.logger.info("Nothing new this run")
            return result

        scored: List[ScoredItem] = []
        curated: List[CuratedItem] = []
        try:
            # Stage 3: Filter
            scored = await self.relevance_filter.filter(candidates)
            result.passed_filter = len(scored)

            # Stage 4: Select
            selected = select(scored, self.config.max_output)

            # Stage 5: Summarize
            curated = await self.summarizer.summarize(selected)
            result.items = curated
        finally:
            # Stage 6: Persist, even when a later stage raised
            self._persist(candidates, scored, curated)

        self.logger.info(
            f"Run complete: {result.fetched} fetched -> {result.new} new -> "
            f"{result.passed_filter} relevant -> {result.selected} selected"
        )
        return result

    def _dedupe(
        self,
        fetched: List[Tuple[SourceConnector, List[CandidateItem]]]
    ) -> List[CandidateItem]:
        """
        Walk each connector in order, keeping at most max_per_source unseen items
        per connector, even when two connectors share a name.

        Raises:
            StorageError: If a history lookup fails
        """
        limit = self.config.max_per_source
        seen_this_run = set()
        candidates = []

        for source, items in fetched:
            taken = 0
            for item in items:
                if taken >= limit:
                    break
                if item.identifier in seen_this_run:
                    continue
                seen_this_run.add(item.identifier)
                if self.history.has_seen(item.identifier):
                    continue
                candidates.append(item)
                taken += 1
            self.logger.debug(f"{source.name}: {taken} new items")

        return candidates

    def _persist(
        self,
        candidates: List[CandidateItem],
        scored: List[ScoredItem],
        curated: List[CuratedItem]
    ) -> None:
        scores = {item.identifier: item.relevance_score for item in scored}
        glosses = {item.identifier: item.gloss for item in curated}

        inserted = 0
        for candidate in candidates:
            record = HistoryRecord.from_candidate(
                candidate,
                score=scores.get(candidate.identifier),
                gloss=glosses.get(candidate.identifier)
            )
            if self.history.record_seen(record):
                inserted += 1

        self.logger.info(f"Persisted {inserted}/{len(candidates)} candidates to history")
