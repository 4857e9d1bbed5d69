"""Tests for source connectors."""

import json

import httpx
import pytest

from news_curator.config import Config, PipelineConfig, SourceConfig, SummarizationConfig
from news_curator.fetchers import (
    GitHubTrendingSource,
    HackerNewsSource,
    MultiSourceFetcher,
    RSSSource,
    build_source,
    build_sources
)

from conftest import make_candidate, mock_transport


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Blog</title>
    <item>
      <title>Postgres 17 released</title>
      <link>https://example.com/pg17</link>
      <description>&lt;p&gt;Incremental backups and &lt;b&gt;faster&lt;/b&gt; vacuum.&lt;/p&gt;</description>
      <pubDate>Mon, 30 Sep 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>No link here</title>
    </item>
    <item>
      <title>Short one</title>
      <link>https://example.com/short</link>
    </item>
  </channel>
</rss>
"""

TRENDING_HTML = """
<html><body>
<article class="Box-row">
  <h2 class="h3 lh-condensed">
    <a href="/acme/fastdb" class="Link">
      <span class="text-normal">acme /</span> fastdb
    </a>
  </h2>
  <p class="col-9 color-fg-muted my-1 pr-4">
    An embedded database written in Rust
  </p>
  <div class="f6 color-fg-muted mt-2">
    <span class="d-inline-block float-sm-right">1,234 stars today</span>
  </div>
</article>
<article class="Box-row">
  <h2 class="h3 lh-condensed"><a href="/solo/tool">solo / tool</a></h2>
  <div class="f6"><span>12 stars today</span></div>
</article>
</body></html>
"""


class TestRSSSource:
    """Test feed parsing and fetching."""

    @pytest.fixture
    def source(self):
        return RSSSource(
            SourceConfig(name="Blog", type="rss", category="tech", url="https://example.com/feed.xml"),
            max_retries=1
        )

    @pytest.mark.asyncio
    async def test_fetch_parses_entries(self, source):
        with mock_transport(lambda request: httpx.Response(200, text=RSS_FEED)):
            items = await source.fetch()

        assert [i.identifier for i in items] == ["https://example.com/pg17", "https://example.com/short"]
        first = items[0]
        assert first.title == "Postgres 17 released"
        assert first.source_name == "Blog"
        assert first.category == "tech"
        assert first.raw_content == "Incremental backups and faster vacuum."
        assert first.published_at.year == 2024
        assert items[1].raw_content == ""

    def test_empty_content_list(self, source):
        item = source._parse_entry({"link": "https://example.com/a", "title": "Bare entry", "content": []})

        assert item.title == "Bare entry"
        assert item.raw_content == ""

    @pytest.mark.asyncio
    async def test_fetch_raises_after_retries(self, source):
        with mock_transport(lambda request: httpx.Response(503)):
            with pytest.raises(httpx.HTTPStatusError):
                await source.fetch()


class TestHackerNewsSource:
    """Test top-story fetching."""

    @pytest.mark.asyncio
    async def test_fetch_top_stories(self):
        stories = {
            1: {"id": 1, "title": "Show HN: fastdb", "url": "https://fastdb.dev", "score": 512,
                "descendants": 143, "time": 1727690000},
            2: {"id": 2, "title": "Ask HN: Who is hiring?", "score": 300},
            3: {"id": 3, "title": "Rust 2024", "url": "https://blog.rust-lang.org/2024", "score": 90},
        }

        def handler(request):
            if request.url.path.endswith("topstories.json"):
                return httpx.Response(200, json=[1, 2, 3, 4])
            item_id = int(request.url.path.rsplit("/", 1)[1].split(".")[0])
            if item_id not in stories:
                return httpx.Response(404)
            return httpx.Response(200, content=json.dumps(stories[item_id]))

        source = HackerNewsSource(SourceConfig(name="HN", type="hackernews", category="tech", limit=4))
        with mock_transport(handler):
            items = await source.fetch()

        assert [i.identifier for i in items] == ["https://fastdb.dev", "https://blog.rust-lang.org/2024"]
        assert items[0].raw_content == "HN Score: 512, 143 comments"
        assert items[1].raw_content == "HN Score: 90, 0 comments"
        assert items[0].published_at is not None


class TestGitHubTrendingSource:
    """Test trending page parsing."""

    def test_parse_page(self):
        source = GitHubTrendingSource(
            SourceConfig(name="GitHub", type="github_trending", category="repos", languages=["rust"])
        )

        items = source.parse_page(TRENDING_HTML)

        assert [i.title for i in items] == ["acme/fastdb", "solo/tool"]
        assert items[0].identifier == "https://github.com/acme/fastdb"
        assert items[0].raw_content == "An embedded database written in Rust (★1234 today)"
        assert items[1].raw_content == "No description (★12 today)"

    @pytest.mark.asyncio
    async def test_failed_language_is_skipped(self):
        def handler(request):
            if "/rust" in request.url.path:
                return httpx.Response(200, text=TRENDING_HTML)
            return httpx.Response(429)

        source = GitHubTrendingSource(
            SourceConfig(name="GitHub", type="github_trending", category="repos", languages=["go", "rust"]),
            per_language=1
        )
        with mock_transport(handler):
            items = await source.fetch()

        assert [i.title for i in items] == ["acme/fastdb"]


class TestMultiSource:
    """Test source construction and aggregation."""

    def test_build_sources_skips_disabled(self):
        config = Config(
            sources=[
                SourceConfig(name="HN", type="hackernews", category="tech"),
                SourceConfig(name="Off", type="rss", category="tech", url="https://x", enabled=False),
                SourceConfig(name="GH", type="github_trending", category="repos"),
            ],
            pipeline=PipelineConfig(),
            summarization=SummarizationConfig()
        )

        sources = build_sources(config)

        assert [type(s) for s in sources] == [HackerNewsSource, GitHubTrendingSource]

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            build_source(SourceConfig(name="X", type="twitter", category="tech"))

    @pytest.mark.asyncio
    async def test_fetch_all_keeps_source_order(self):
        class Working(RSSSource):
            async def fetch(self):
                return [make_candidate(1, source=self.name)]

        class Broken(RSSSource):
            async def fetch(self):
                raise httpx.ConnectError("refused")

        sources = [
            Working(SourceConfig(name="A", type="rss", category="tech", url="https://a")),
            Broken(SourceConfig(name="B", type="rss", category="tech", url="https://b")),
        ]
        fetcher = MultiSourceFetcher(sources)

        result = await fetcher.fetch_all()

        assert [(source.name, len(items)) for source, items in result] == [("A", 1), ("B", 0)]
        assert fetcher.errors == ["B: refused"]

    @pytest.mark.asyncio
    async def test_same_named_sources_stay_separate(self):
        class Static(RSSSource):
            def __init__(self, config, start):
                super().__init__(config)
                self.start = start

            async def fetch(self):
                return [make_candidate(n, source=self.name) for n in range(self.start, self.start + 3)]

        config = SourceConfig(name="Blog", type="rss", category="tech", url="https://blog.example.com/feed")
        sources = [Static(config, 0), Static(config, 10)]

        result = await MultiSourceFetcher(sources).fetch_all()

        assert [source for source, _ in result] == sources
        assert [len(items) for _, items in result] == [3, 3]
