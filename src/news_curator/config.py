"""Configuration management for the News Curator."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import load_dotenv


SOURCE_TYPES = {'rss', 'hackernews', 'github_trending'}
DELIVERY_CHANNELS = {'webhook', 'email', 'none'}

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass
class SourceConfig:
    """Configuration for a single content source."""
    name: str
    type: str  # "rss", "hackernews" or "github_trending"
    category: str
    enabled: bool = True
    url: Optional[str] = None  # rss only
    languages: List[str] = field(default_factory=list)  # github_trending only
    limit: int = 30  # hackernews: number of top stories to inspect


@dataclass
class PipelineConfig:
    """Intake, filtering and selection limits for a run."""
    max_per_source: int = 10
    max_output: int = 20
    relevance_threshold: float = 0.5
    batch_size: int = 20
    max_concurrent_requests: int = 2
    interests: List[str] = field(default_factory=list)


@dataclass
class EngagementConfig:
    """Thresholds for engagement metrics parsed from title-only items."""
    annotate_threshold: int = 100
    newsworthy_threshold: int = 300


@dataclass
class SummarizationConfig:
    """Configuration for gloss generation."""
    output_language: str = "English"
    exempt_categories: List[str] = field(default_factory=list)
    batch_size: int = 20
    min_content_chars: int = 50
    max_gloss_chars: int = 100
    max_tokens: int = 1024
    temperature: float = 0.1
    engagement: EngagementConfig = field(default_factory=EngagementConfig)
    low_information_patterns: List[str] = field(default_factory=list)


@dataclass
class ProviderConfig:
    """Configuration for a single AI provider."""
    provider_id: str  # e.g., "groq_primary", "anthropic_fallback"
    provider_type: str  # "anthropic" or "openai"
    api_key: str
    model: str
    enabled: bool = True
    priority: int = 10  # Lower = higher priority (0-100)
    base_url: Optional[str] = None
    timeout: int = 30
    input_cost_per_1M_tokens: float = 0.0  # For cost tracking
    output_cost_per_1M_tokens: float = 0.0

    def estimated_cost_per_request(self, avg_input_tokens: int = 1500, avg_output_tokens: int = 200) -> float:
        """Estimate cost per request based on average token usage."""
        input_cost = (avg_input_tokens / 1_000_000) * self.input_cost_per_1M_tokens
        output_cost = (avg_output_tokens / 1_000_000) * self.output_cost_per_1M_tokens
        return input_cost + output_cost


@dataclass
class WebhookConfig:
    """Discord-compatible webhook delivery."""
    url: str
    max_message_chars: int = 1900
    max_items_per_category: int = 5


@dataclass
class SMTPConfig:
    """SMTP server configuration."""
    host: str
    port: int
    username: str
    password: str
    from_email: str
    recipient_email: str
    use_tls: bool = True


@dataclass
class Config:
    """Main application configuration."""
    sources: List[SourceConfig]
    pipeline: PipelineConfig
    summarization: SummarizationConfig

    providers: List[ProviderConfig] = field(default_factory=list)
    provider_strategy: str = "priority"  # "priority" or "cost"

    delivery_channel: str = "webhook"
    webhook: Optional[WebhookConfig] = None
    smtp: Optional[SMTPConfig] = None
    categories: Dict[str, str] = field(default_factory=dict)  # category -> display label

    dry_run: bool = False
    run_time: Optional[str] = None  # "HH:MM" daily; takes precedence over interval
    interval_minutes: int = 60
    history_db: Path = field(default_factory=lambda: Path("data/history.db"))
    log_file: Path = field(default_factory=lambda: Path("logs/news_curator.log"))

    @property
    def enabled_sources(self) -> List[SourceConfig]:
        return [s for s in self.sources if s.enabled]


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def _load_sources(sources_config) -> List[SourceConfig]:
    if not isinstance(sources_config, list):
        raise ConfigError("'sources' must be a list")

    sources = []
    for source_data in sources_config:
        if not isinstance(source_data, dict):
            raise ConfigError(f"Invalid source entry: {source_data!r}")
        try:
            sources.append(SourceConfig(
                name=source_data['name'],
                type=source_data['type'],
                category=source_data['category'],
                enabled=source_data.get('enabled', True),
                url=source_data.get('url'),
                languages=source_data.get('languages', []),
                limit=source_data.get('limit', 30)
            ))
        except KeyError as e:
            raise ConfigError(f"Source configuration missing field {e}: {source_data!r}")
    return sources


def _load_providers(yaml_config: dict) -> List[ProviderConfig]:
    """
    Build provider configs from the `providers` list, or from legacy
    environment credentials when no list is configured.

    Missing credentials are not an error: the pipeline then runs unfiltered
    and uses titles as glosses.
    """
    providers_config = yaml_config.get('providers') or []
    providers = []

    if providers_config:
        for prov_data in providers_config:
            try:
                api_key_env_var = prov_data.get('api_key_env')
                if not api_key_env_var:
                    if prov_data['provider_type'] == 'anthropic':
                        api_key_env_var = 'ANTHROPIC_API_KEY'
                    elif prov_data['provider_type'] == 'openai':
                        api_key_env_var = 'OPENAI_API_KEY'

                api_key = os.getenv(api_key_env_var) if api_key_env_var else None
                if not api_key:
                    api_key = prov_data.get('api_key', '')

                if not api_key:
                    continue

                providers.append(ProviderConfig(
                    provider_id=prov_data['provider_id'],
                    provider_type=prov_data['provider_type'],
                    api_key=api_key,
                    model=prov_data['model'],
                    enabled=prov_data.get('enabled', True),
                    priority=prov_data.get('priority', 10),
                    base_url=prov_data.get('base_url'),
                    timeout=prov_data.get('timeout', 30),
                    input_cost_per_1M_tokens=prov_data.get('input_cost_per_1M_tokens', 0.0),
                    output_cost_per_1M_tokens=prov_data.get('output_cost_per_1M_tokens', 0.0)
                ))
            except KeyError as e:
                raise ConfigError(f"Missing required provider config field: {e}")
        return providers

    # Legacy single-provider mode
    groq_api_key = os.getenv('GROQ_API_KEY')
    if groq_api_key:
        providers.append(ProviderConfig(
            provider_id="groq_legacy",
            provider_type="openai",
            api_key=groq_api_key,
            model=os.getenv('GROQ_MODEL', 'llama-3.3-70b-versatile'),
            priority=1,
            base_url=GROQ_BASE_URL
        ))

    anthropic_api_key = os.getenv('ANTHROPIC_API_KEY')
    if anthropic_api_key:
        providers.append(ProviderConfig(
            provider_id="anthropic_legacy",
            provider_type="anthropic",
            api_key=anthropic_api_key,
            model=os.getenv('ANTHROPIC_MODEL', 'claude-sonnet-4-5'),
            priority=2,
            input_cost_per_1M_tokens=3.0,
            output_cost_per_1M_tokens=15.0
        ))

    return providers


def load_config(config_path: str = "config/config.yaml") -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the configuration YAML file

    Returns:
        Config object with all settings

    Raises:
        ConfigError: If configuration is invalid or missing required fields
    """
    load_dotenv("config/.env")
    load_dotenv()

    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            yaml_config = yaml.safe_load(f)
    except Exception as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}")

    if not yaml_config:
        raise ConfigError("Configuration file is empty")

    if 'sources' not in yaml_config:
        raise ConfigError("Missing required configuration section: sources")

    sources = _load_sources(yaml_config['sources'])

    pipeline_config = yaml_config.get('pipeline', {}) or {}
    pipeline = PipelineConfig(
        max_per_source=pipeline_config.get('max_per_source', 10),
        max_output=int(os.getenv('MAX_ARTICLES') or pipeline_config.get('max_output', 20)),
        relevance_threshold=pipeline_config.get('relevance_threshold', 0.5),
        batch_size=pipeline_config.get('batch_size', 20),
        max_concurrent_requests=pipeline_config.get('max_concurrent_requests', 2),
        interests=yaml_config.get('interests', []) or []
    )

    summ_config = yaml_config.get('summarization', {}) or {}
    engagement_config = summ_config.get('engagement', {}) or {}
    summarization = SummarizationConfig(
        output_language=summ_config.get('output_language', 'English'),
        exempt_categories=summ_config.get('exempt_categories', []) or [],
        batch_size=summ_config.get('batch_size', pipeline.batch_size),
        min_content_chars=summ_config.get('min_content_chars', 50),
        max_gloss_chars=summ_config.get('max_gloss_chars', 100),
        max_tokens=summ_config.get('max_tokens', 1024),
        temperature=summ_config.get('temperature', 0.1),
        engagement=EngagementConfig(
            annotate_threshold=engagement_config.get('annotate_threshold', 100),
            newsworthy_threshold=engagement_config.get('newsworthy_threshold', 300)
        ),
        low_information_patterns=summ_config.get('low_information_patterns', []) or []
    )

    providers = _load_providers(yaml_config)

    delivery_config = yaml_config.get('delivery', {}) or {}
    delivery_channel = delivery_config.get('channel', 'webhook')

    webhook = None
    webhook_url = os.getenv('DISCORD_WEBHOOK') or delivery_config.get('webhook_url')
    if webhook_url:
        webhook = WebhookConfig(
            url=webhook_url,
            max_message_chars=delivery_config.get('max_message_chars', 1900),
            max_items_per_category=delivery_config.get('max_items_per_category', 5)
        )

    smtp = None
    email_config = delivery_config.get('email', {}) or {}
    smtp_password = os.getenv('SMTP_PASSWORD')
    recipient_email = os.getenv('RECIPIENT_EMAIL') or email_config.get('recipient_email')
    if delivery_channel == 'email' and smtp_password and recipient_email:
        smtp = SMTPConfig(
            host=email_config.get('smtp_host', 'smtp.gmail.com'),
            port=email_config.get('smtp_port', 587),
            username=email_config.get('smtp_username', ''),
            password=smtp_password,
            from_email=email_config.get('from_email', ''),
            recipient_email=recipient_email,
            use_tls=email_config.get('use_tls', True)
        )

    execution_config = yaml_config.get('execution', {}) or {}
    paths_config = yaml_config.get('paths', {}) or {}

    dry_run_env = os.getenv('DRY_RUN')
    dry_run = (
        dry_run_env.lower() == 'true' if dry_run_env is not None
        else execution_config.get('dry_run', False)
    )

    try:
        config = Config(
            sources=sources,
            pipeline=pipeline,
            summarization=summarization,
            providers=providers,
            provider_strategy=yaml_config.get('provider_strategy', 'priority'),
            delivery_channel=delivery_channel,
            webhook=webhook,
            smtp=smtp,
            categories=yaml_config.get('categories', {}) or {},
            dry_run=dry_run,
            run_time=execution_config.get('run_time'),
            interval_minutes=execution_config.get('interval_minutes', 60),
            history_db=Path(paths_config.get('history_db', 'data/history.db')),
            log_file=Path(paths_config.get('log_file', 'logs/news_curator.log'))
        )
    except Exception as e:
        raise ConfigError(f"Failed to create configuration object: {e}")

    return config


def validate_config(config: Config) -> None:
    """
    Validate configuration object.

    Args:
        config: Configuration object to validate

    Raises:
        ConfigError: If configuration is invalid
    """
    for source in config.sources:
        if source.type not in SOURCE_TYPES:
            raise ConfigError(
                f"Unknown type '{source.type}' for source '{source.name}'. "
                f"Must be one of: {sorted(SOURCE_TYPES)}"
            )
        if source.type == 'rss' and not source.url:
            raise ConfigError(f"RSS source '{source.name}' has no url")

    pipeline = config.pipeline
    if not (0 <= pipeline.relevance_threshold <= 1):
        raise ConfigError(
            f"Invalid relevance_threshold: {pipeline.relevance_threshold}. Must be between 0 and 1."
        )

    for name, value in [
        ('max_per_source', pipeline.max_per_source),
        ('max_output', pipeline.max_output),
        ('batch_size', pipeline.batch_size),
        ('max_concurrent_requests', pipeline.max_concurrent_requests),
        ('summarization.batch_size', config.summarization.batch_size),
    ]:
        if value < 1:
            raise ConfigError(f"Invalid {name}: {value}. Must be at least 1.")

    if config.delivery_channel not in DELIVERY_CHANNELS:
        raise ConfigError(
            f"Invalid delivery channel '{config.delivery_channel}'. "
            f"Must be one of: {sorted(DELIVERY_CHANNELS)}"
        )

    if not config.dry_run:
        if config.delivery_channel == 'webhook' and config.webhook is None:
            raise ConfigError(
                "DISCORD_WEBHOOK not configured. "
                "Set it in config/.env or use dry_run."
            )
        if config.delivery_channel == 'email':
            if config.smtp is None:
                raise ConfigError(
                    "SMTP_PASSWORD and RECIPIENT_EMAIL must be set for email delivery."
                )
            if '@' not in config.smtp.recipient_email:
                raise ConfigError(f"Invalid recipient email: {config.smtp.recipient_email}")

    if config.run_time:
        try:
            hours, minutes = config.run_time.split(':')
            if not (0 <= int(hours) <= 23 and 0 <= int(minutes) <= 59):
                raise ValueError
        except ValueError:
            raise ConfigError(f"Invalid run_time format (use HH:MM): {config.run_time}")
    elif config.interval_minutes < 1:
        raise ConfigError(f"Invalid interval_minutes: {config.interval_minutes}")

    for path in [config.history_db.parent, config.log_file.parent]:
        if not path.exists():
            try:
                path.mkdir(parents=True, exist_ok=True)
            except Exception as e:
                raise ConfigError(f"Failed to create directory {path}: {e}")
