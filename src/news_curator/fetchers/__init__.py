"""Fetchers package for the supported content sources."""

from .base import SourceConnector
from .rss_fetcher import RSSSource
from .hacker_news import HackerNewsSource
from .github_trending import GitHubTrendingSource
from .multi_source import MultiSourceFetcher, build_source, build_sources

__all__ = [
    'SourceConnector',
    'RSSSource',
    'HackerNewsSource',
    'GitHubTrendingSource',
    'MultiSourceFetcher',
    'build_source',
    'build_sources'
]
