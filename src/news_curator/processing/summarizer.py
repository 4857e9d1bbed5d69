"""Quality-gated one-line summarization of selected items."""

import asyncio
from typing import Dict, List, Optional

from ..config import SummarizationConfig
from ..logger import get_logger
from ..models import CuratedItem, ScoredItem
from ..providers import LLMClient, ProviderError
from .quality import EngagementSignal, LowQualityDetector, has_sufficient_content
from .responses import GlossEntry, parse_json_array


class QualityGatedSummarizer:
    """
    Produces the gloss shown for each selected item.

    Items with real content are summarized in batches; title-only items get
    a locally synthesized gloss, or a title rewrite when their engagement is
    newsworthy. Every generated gloss passes the low-quality detector and
    falls back to the item's title when rejected.
    """

    def __init__(
        self,
        config: SummarizationConfig,
        client: Optional[LLMClient] = None,
        detector: Optional[LowQualityDetector] = None,
        max_concurrent_requests: int = 2
    ):
        """
        Initialize summarizer.

        Args:
            config: Summarization settings
            client: LLM client; None disables every external call
            detector: Low-quality gloss detector (defaults to the built-in predicates)
            max_concurrent_requests: Concurrent batch limit
        """
        self.config = config
        self.client = client
        self.detector = detector or LowQualityDetector()
        self.exempt_categories = set(config.exempt_categories)
        self.patterns = config.low_information_patterns or None
        self.semaphore = asyncio.Semaphore(max_concurrent_requests)
        self.logger = get_logger()

        self.rejected = 0
        self.failed_batches = 0

    @property
    def enabled(self) -> bool:
        return self.client is not None and self.client.available

    async def summarize(self, items: List[ScoredItem]) -> List[CuratedItem]:
        """
        Attach a gloss to every item, preserving order.

        Args:
            items: Selected items

        Returns:
            One CuratedItem per input; exempt categories carry an empty gloss
        """
        glosses: List[Optional[str]] = [None] * len(items)
        to_summarize: List[int] = []
        to_rewrite: List[int] = []
        signals: Dict[int, EngagementSignal] = {}

        for i, item in enumerate(items):
            if item.category in self.exempt_categories:
                glosses[i] = ""
                continue

            content = item.candidate.raw_content
            if has_sufficient_content(content, self.config.min_content_chars, self.patterns):
                to_summarize.append(i)
                continue

            signal = EngagementSignal.parse(content)
            if signal:
                signals[i] = signal
            if (
                signal
                and signal.points >= self.config.engagement.newsworthy_threshold
                and self.enabled
            ):
                to_rewrite.append(i)
            else:
                glosses[i] = self._synthesize(item, signal)

        self.logger.info(
            f"Summarizing {len(items)} items: {len(to_summarize)} with content, "
            f"{len(to_rewrite)} title rewrites, "
            f"{len(items) - len(to_summarize) - len(to_rewrite)} local"
        )

        if to_summarize:
            if self.enabled:
                summaries = await self._run_batches(items, to_summarize, self._summarize_batch)
                for i in to_summarize:
                    glosses[i] = self._accept(summaries.get(i), items[i])
            else:
                for i in to_summarize:
                    glosses[i] = items[i].title

        if to_rewrite:
            rewrites = await self._run_batches(items, to_rewrite, self._rewrite_batch)
            for i in to_rewrite:
                localized = rewrites.get(i)
                if localized is None:
                    glosses[i] = self._synthesize(items[i], signals[i])
                else:
                    glosses[i] = signals[i].annotate(self._accept(localized, items[i]))

        return [CuratedItem(scored=item, gloss=gloss) for item, gloss in zip(items, glosses)]

    def _synthesize(self, item: ScoredItem, signal: Optional[EngagementSignal]) -> str:
        if signal and signal.points >= self.config.engagement.annotate_threshold:
            return signal.annotate(item.title)
        return item.title

    def _accept(self, gloss: Optional[str], item: ScoredItem) -> str:
        tag = self.detector.check(gloss, item.title)
        if tag:
            self.rejected += 1
            self.logger.debug(f"Rejected gloss for '{item.title}' ({tag}): {gloss!r}")
            return item.title
        return gloss.strip()

    async def _run_batches(self, items, indexes, handler) -> Dict[int, str]:
        """Run handler over batches of item indexes; failed batches are left out."""
        size = self.config.batch_size
        batches = [indexes[i:i + size] for i in range(0, len(indexes), size)]
        results = await asyncio.gather(
            *(handler([items[i] for i in batch]) for batch in batches)
        )

        merged: Dict[int, str] = {}
        for batch, result in zip(batches, results):
            if result is None:
                continue
            for position, text in result.items():
                merged[batch[position]] = text
        return merged

    async def _complete(self, prompt: str, count: int) -> Optional[Dict[int, str]]:
        async with self.semaphore:
            try:
                text = await self.client.complete(
                    prompt, self.config.max_tokens, self.config.temperature
                )
            except ProviderError as e:
                self.failed_batches += 1
                self.logger.warning(f"Summarizer request failed, using titles for {count} items: {e}")
                return None
            except Exception as e:
                self.failed_batches += 1
                self.logger.error(f"Unexpected summarizer failure, using titles for {count} items: {e}")
                return None

        parsed = parse_json_array(text, GlossEntry)
        if not parsed.ok:
            self.failed_batches += 1
            self.logger.warning(f"Malformed summarizer response ({parsed.error}), using titles for {count} items")
            return None

        return {
            entry.index: entry.summary
            for entry in parsed.entries
            if 0 <= entry.index < count
        }

    async def _summarize_batch(self, batch: List[ScoredItem]) -> Optional[Dict[int, str]]:
        articles = "\n\n".join(
            f"[{i}] {item.title}\n{item.candidate.raw_content[:300]}"
            for i, item in enumerate(batch)
        )
        language = self.config.output_language
        limit = self.config.max_gloss_chars

        prompt = f"""Summarize each article in {language} as one terse sentence of at most {limit} characters.

RULES:
- State concrete facts: numbers, named techniques or products, license and availability, target audience
- Do NOT paraphrase the title
- Do NOT write "see the article for details" or "an article about ..."
- If no concrete fact can be extracted, return the original title verbatim

Articles:
{articles}

Respond with JSON array only:
[{{"index": 0, "summary": "one sentence"}}, ...]"""

        return await self._complete(prompt, len(batch))

    async def _rewrite_batch(self, batch: List[ScoredItem]) -> Optional[Dict[int, str]]:
        titles = "\n".join(f"[{i}] {item.title}" for i, item in enumerate(batch))
        language = self.config.output_language

        prompt = f"""Translate each headline into natural {language}. Keep product and project names unchanged. Do not add information.

Headlines:
{titles}

Respond with JSON array only:
[{{"index": 0, "summary": "translated headline"}}, ...]"""

        return await self._complete(prompt, len(batch))
