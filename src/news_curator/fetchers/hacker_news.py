"""Hacker News top stories source."""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import httpx

from ..models import CandidateItem
from ..config import SourceConfig
from ..logger import get_logger
from .base import SourceConnector


class HackerNewsSource(SourceConnector):
    """Fetches the current top stories from the Hacker News API."""

    TOP_STORIES_URL = "https://hacker-news.firebaseio.com/v0/topstories.json"
    ITEM_URL = "https://hacker-news.firebaseio.com/v0/item/{item_id}.json"

    def __init__(self, config: SourceConfig, timeout: float = 5.0):
        """
        Initialize Hacker News source.

        Args:
            config: Source configuration; `limit` is the number of top stories inspected
            timeout: Per-request timeout in seconds
        """
        super().__init__(config.name, config.category)
        self.limit = config.limit
        self.timeout = timeout
        self.logger = get_logger()
        self.semaphore = asyncio.Semaphore(10)  # Limit concurrent requests

    async def fetch(self) -> List[CandidateItem]:
        """
        Fetch top stories in rank order.

        Stories without an external URL (Ask HN and similar) are skipped.

        Raises:
            httpx.HTTPError: If the top stories list cannot be retrieved
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.TOP_STORIES_URL)
            response.raise_for_status()
            story_ids = response.json()[:self.limit]
            self.logger.debug(f"Retrieved {len(story_ids)} top story IDs from Hacker News")

            stories = await asyncio.gather(*(self._fetch_story(client, sid) for sid in story_ids))

        items = []
        for story in stories:
            item = self._parse_story(story) if story else None
            if item:
                items.append(item)
        return items

    async def _fetch_story(self, client: httpx.AsyncClient, story_id: int) -> Optional[Dict]:
        async with self.semaphore:
            try:
                response = await client.get(self.ITEM_URL.format(item_id=story_id))
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as e:
                self.logger.debug(f"Failed to fetch story {story_id}: {e}")
                return None

    def _parse_story(self, story: Dict) -> Optional[CandidateItem]:
        """
        Convert an HN story to a CandidateItem.

        The content is the engagement annotation, e.g. "HN Score: 512, 143 comments".
        """
        url = story.get('url')
        if not url:
            return None

        timestamp = story.get('time')
        published_at = datetime.fromtimestamp(timestamp) if timestamp else None

        return CandidateItem(
            identifier=url,
            title=story.get('title') or "No title",
            source_name=self.name,
            category=self.category,
            raw_content=f"HN Score: {story.get('score', 0)}, {story.get('descendants', 0)} comments",
            published_at=published_at
        )
