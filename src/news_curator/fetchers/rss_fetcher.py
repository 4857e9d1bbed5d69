"""RSS/Atom feed source."""

import asyncio
from datetime import datetime
from typing import List, Optional

import feedparser
import httpx
from bs4 import BeautifulSoup

from ..models import CandidateItem
from ..config import SourceConfig
from ..logger import get_logger
from .base import SourceConnector


USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


class RSSSource(SourceConnector):
    """Fetches items from a single RSS or Atom feed."""

    def __init__(self, config: SourceConfig, max_retries: int = 3, timeout: float = 15.0):
        """
        Initialize RSS source.

        Args:
            config: Source configuration with the feed URL
            max_retries: Attempts before giving up
            timeout: Per-request timeout in seconds
        """
        super().__init__(config.name, config.category)
        self.url = config.url
        self.max_retries = max_retries
        self.timeout = timeout
        self.logger = get_logger()

    async def fetch(self) -> List[CandidateItem]:
        """
        Fetch and parse the feed with retry logic.

        Raises:
            httpx.HTTPError: When every attempt failed
        """
        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(
                    timeout=self.timeout,
                    follow_redirects=True,
                    headers={"User-Agent": USER_AGENT}
                ) as client:
                    response = await client.get(self.url)
                    response.raise_for_status()
                    content = response.text
                break
            except httpx.HTTPError as e:
                self.logger.warning(f"Attempt {attempt + 1}/{self.max_retries} failed for {self.url}: {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(2 ** attempt)  # Exponential backoff: 1s, 2s, 4s
                else:
                    raise

        feed = feedparser.parse(content)
        items = []
        for entry in feed.entries:
            item = self._parse_entry(entry)
            if item:
                items.append(item)

        self.logger.debug(f"Fetched {len(items)} items from {self.url}")
        return items

    def _parse_entry(self, entry) -> Optional[CandidateItem]:
        """
        Parse a single feed entry into a CandidateItem.

        Returns:
            CandidateItem, or None if the entry has no link or title
        """
        url = entry.get('link', '')
        title = entry.get('title', '').strip()
        if not url or not title:
            return None

        content = (
            entry.get('summary', '') or
            entry.get('description', '') or
            (entry.get('content') or [{}])[0].get('value', '')
        )
        if content:
            content = BeautifulSoup(content, 'html.parser').get_text(' ', strip=True)

        published_at = None
        parsed = entry.get('published_parsed') or entry.get('updated_parsed')
        if parsed:
            try:
                published_at = datetime(*parsed[:6])
            except (TypeError, ValueError):
                published_at = None

        return CandidateItem(
            identifier=url,
            title=title,
            source_name=self.name,
            category=self.category,
            raw_content=content,
            published_at=published_at
        )
