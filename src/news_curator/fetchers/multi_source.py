"""Multi-source fetcher coordinator for aggregating content from every source."""

import asyncio
from typing import List, Tuple

from ..models import CandidateItem
from ..config import Config, SourceConfig
from ..logger import get_logger
from .base import SourceConnector
from .rss_fetcher import RSSSource
from .hacker_news import HackerNewsSource
from .github_trending import GitHubTrendingSource


SOURCE_CLASSES = {
    'rss': RSSSource,
    'hackernews': HackerNewsSource,
    'github_trending': GitHubTrendingSource,
}


def build_source(config: SourceConfig) -> SourceConnector:
    """Create the connector for a source configuration."""
    try:
        source_class = SOURCE_CLASSES[config.type]
    except KeyError:
        raise ValueError(f"Unknown source type: {config.type}")
    return source_class(config)


def build_sources(config: Config) -> List[SourceConnector]:
    """Create connectors for every enabled source."""
    return [build_source(source) for source in config.enabled_sources]


class MultiSourceFetcher:
    """Fetches every source in parallel, isolating failures per source."""

    def __init__(self, sources: List[SourceConnector]):
        """
        Initialize multi-source fetcher.

        Args:
            sources: Source connectors, in priority order
        """
        self.sources = sources
        self.logger = get_logger()
        self.errors: List[str] = []

    async def fetch_all(self) -> List[Tuple[SourceConnector, List[CandidateItem]]]:
        """
        Fetch items from all sources in parallel.

        Returns:
            One (source, items) pair per connector, following the order of
            `sources`; items keep the order the source returned them in.
            A failed source pairs with an empty list and its error is kept
            in `errors`.
        """
        self.errors = []
        self.logger.info(f"Starting fetch from {len(self.sources)} sources")

        results = await asyncio.gather(*(self._safe_fetch(source) for source in self.sources))

        items_by_source = []
        for source, (items, error) in zip(self.sources, results):
            items_by_source.append((source, items))
            if error:
                self.errors.append(error)

        total = sum(len(items) for _, items in items_by_source)
        self.logger.info(
            f"Multi-source fetch complete: {total} total items from {len(self.sources)} sources "
            f"({len(self.errors)} failed)"
        )
        return items_by_source

    async def _safe_fetch(self, source: SourceConnector) -> Tuple[List[CandidateItem], str]:
        """
        Execute a source fetch with error handling.

        Returns:
            Tuple of (items, error message); items is empty on failure
        """
        try:
            items = await source.fetch()
            self.logger.info(f"{source.name}: fetched {len(items)} items")
            return items, ""
        except Exception as e:
            self.logger.error(f"{source.name}: fetch failed - {e}", exc_info=True)
            return [], f"{source.name}: {e}"
