"""Discord-compatible webhook delivery."""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import httpx

from ..models import CuratedItem
from ..config import WebhookConfig
from ..logger import get_logger
from .base import Notifier, group_by_category


class WebhookNotifier(Notifier):
    """Posts a plain-text digest, split into messages under the size limit."""

    name = "webhook"

    def __init__(
        self,
        config: WebhookConfig,
        categories: Optional[Dict[str, str]] = None,
        timeout: float = 15.0,
        chunk_delay: float = 0.5
    ):
        """
        Initialize webhook notifier.

        Args:
            config: Webhook URL and message limits
            categories: Category -> display label
            timeout: Per-request timeout in seconds
            chunk_delay: Pause between consecutive messages
        """
        self.config = config
        self.categories = categories or {}
        self.timeout = timeout
        self.chunk_delay = chunk_delay
        self.logger = get_logger()

    def select_payload(self, items: List[CuratedItem]) -> List[CuratedItem]:
        limit = self.config.max_items_per_category
        payload = []
        for group in group_by_category(items).values():
            payload.extend(group[:limit])
        # Keep the batch order
        included = {id(item) for item in payload}
        return [item for item in items if id(item) in included]

    def format_digest(self, items: List[CuratedItem], date: Optional[datetime] = None) -> str:
        """Render the digest text for the given items."""
        date = date or datetime.now()
        lines = [f"📰 **Today's Tech Digest** ({date.strftime('%Y-%m-%d')})", ""]

        for category, group in group_by_category(items).items():
            lines.append(f"**{self.categories.get(category, category)}**")
            for item in group:
                summary = f" - {item.gloss}" if item.gloss else ""
                lines.append(f"• [{item.title}]({item.identifier}){summary}")
            lines.append("")

        return "\n".join(lines)

    def split_message(self, content: str) -> List[str]:
        """Split on line boundaries so each chunk fits the message limit."""
        limit = self.config.max_message_chars
        chunks = []
        chunk = ""
        for line in content.split("\n"):
            line = line[:limit - 1]
            if chunk and len(chunk) + len(line) + 1 > limit:
                chunks.append(chunk)
                chunk = ""
            chunk += line + "\n"
        if chunk.strip():
            chunks.append(chunk)
        return chunks

    async def deliver(self, items: List[CuratedItem]) -> bool:
        """
        Post the digest; fails as soon as one message is rejected.

        Returns:
            True if every message was accepted
        """
        if not items:
            self.logger.info("No items to send")
            return True

        chunks = self.split_message(self.format_digest(items))

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                for i, chunk in enumerate(chunks):
                    response = await client.post(self.config.url, json={"content": chunk})
                    if response.is_error:
                        self.logger.error(
                            f"Webhook rejected message {i + 1}/{len(chunks)}: {response.status_code}"
                        )
                        return False
                    if i < len(chunks) - 1:
                        await asyncio.sleep(self.chunk_delay)
        except httpx.HTTPError as e:
            self.logger.error(f"Failed to send webhook notification: {e}")
            return False

        self.logger.info(f"Sent {len(items)} items to webhook in {len(chunks)} messages")
        return True
