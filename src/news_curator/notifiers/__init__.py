"""Delivery channels for curated batches."""

from typing import Optional

from ..config import Config, ConfigError
from .base import Notifier, NullNotifier, group_by_category
from .webhook import WebhookNotifier
from .email_notifier import EmailNotifier


def build_notifier(config: Config) -> Optional[Notifier]:
    """
    Create the notifier for the configured delivery channel.

    Returns:
        Notifier, or None when the channel is not configured (dry run)

    Raises:
        ConfigError: If the channel is unknown
    """
    channel = config.delivery_channel
    if channel == 'none':
        return NullNotifier()
    if channel == 'webhook':
        return WebhookNotifier(config.webhook, config.categories) if config.webhook else None
    if channel == 'email':
        return EmailNotifier(config.smtp, config.categories) if config.smtp else None
    raise ConfigError(f"Unknown delivery channel: {channel}")


__all__ = [
    'Notifier',
    'NullNotifier',
    'WebhookNotifier',
    'EmailNotifier',
    'build_notifier',
    'group_by_category'
]
