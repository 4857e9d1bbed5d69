"""GitHub Trending repositories source."""

import re
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from ..models import CandidateItem
from ..config import SourceConfig
from ..logger import get_logger
from .base import SourceConnector


TRENDING_URL = "https://github.com/trending/{language}?since=daily"
_STARS_TODAY = re.compile(r"(\d[\d,]*)\s*stars?\s*today", re.IGNORECASE)


class GitHubTrendingSource(SourceConnector):
    """Scrapes the daily trending page for each configured language."""

    def __init__(self, config: SourceConfig, per_language: int = 5, timeout: float = 15.0):
        """
        Initialize GitHub Trending source.

        Args:
            config: Source configuration with the language list
            per_language: Repositories kept per language page
            timeout: Per-request timeout in seconds
        """
        super().__init__(config.name, config.category)
        self.languages = config.languages or ["python"]
        self.per_language = per_language
        self.timeout = timeout
        self.logger = get_logger()

    async def fetch(self) -> List[CandidateItem]:
        """
        Fetch trending repositories language by language.

        A failing language page is logged and skipped.
        """
        items = []
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": "NewsCurator/1.0", "Accept": "text/html"}
        ) as client:
            for language in self.languages:
                try:
                    response = await client.get(TRENDING_URL.format(language=language))
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    self.logger.warning(f"Failed to fetch GitHub trending for {language}: {e}")
                    continue
                items.extend(self.parse_page(response.text)[:self.per_language])
        return items

    def parse_page(self, html: str) -> List[CandidateItem]:
        """Parse repository rows from a trending page."""
        soup = BeautifulSoup(html, 'html.parser')
        items = []
        for row in soup.select('article.Box-row'):
            item = self._parse_row(row)
            if item:
                items.append(item)
        return items

    def _parse_row(self, row) -> Optional[CandidateItem]:
        link = row.select_one('h2 a[href]') or row.find('a', href=re.compile(r'^/[^/]+/[^/]+$'))
        if not link:
            return None

        repo_path = link['href'].strip()
        repo_name = repo_path.lstrip('/')

        desc_tag = row.find('p')
        description = desc_tag.get_text(' ', strip=True) if desc_tag else "No description"

        stars_match = _STARS_TODAY.search(row.get_text(' ', strip=True))
        stars = int(stars_match.group(1).replace(',', '')) if stars_match else 0

        return CandidateItem(
            identifier=f"https://github.com{repo_path}",
            title=repo_name,
            source_name=self.name,
            category=self.category,
            raw_content=f"{description} (★{stars} today)"
        )
