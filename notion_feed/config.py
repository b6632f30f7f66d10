"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- SiteConfig: Site-specific values (may be left empty)
- DefaultsConfig: Global fallbacks for every site value
- ContentConfig: Block inclusion policy and content composition
- FeedConfig: Item limit and regeneration interval
- FetchConfig: Block-tree API settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


@dataclass
class SiteConfig:
    """Site-specific values. Empty fields fall back to DefaultsConfig.

    Attributes:
        title: Feed title
        description: Feed description
        link: Site base URL used for item links
        author: Author name for the feed
        lang: Feed language code
        sub_path: Path segment appended to the site link for the channel link
        contact_email: Author e-mail address
    """

    title: str | None = None
    description: str | None = None
    link: str | None = None
    author: str | None = None
    lang: str | None = None
    sub_path: str | None = None
    contact_email: str | None = None


@dataclass
class DefaultsConfig:
    """Global defaults used when a site value is missing."""

    title: str = "Blog"
    description: str = ""
    link: str = "https://example.com"
    author: str = "Anonymous"
    lang: str = "en-US"
    sub_path: str = ""
    contact_email: str = ""


@dataclass
class ContentConfig:
    """Configuration for block extraction and content composition.

    Attributes:
        include_callout: Treat callout blocks as paragraphs instead of skipping them
        include_toggle: Treat toggle blocks as paragraphs instead of skipping them
        wrap_container: Wrap each content fragment in a styled container
        summary_max_chars: Hard character limit for item descriptions
    """

    include_callout: bool = False
    include_toggle: bool = False
    wrap_container: bool = False
    summary_max_chars: int = 200


@dataclass
class FeedConfig:
    """Configuration for feed generation.

    Attributes:
        limit: Number of most recent documents turned into feed items
        freshness_minutes: Skip regeneration when feed.xml is younger than this
    """

    limit: int = 10
    freshness_minutes: int = 10


@dataclass
class FetchConfig:
    """Configuration for fetching block trees.

    Attributes:
        api_url: Base URL of the Notion API v3 endpoint
        timeout_seconds: HTTP request timeout
        retries: Number of retry attempts for failed requests
        concurrency: Maximum number of documents fetched at once
        chunk_limit: Blocks requested per page chunk
        max_chunks: Upper bound of chunks followed per document
        token: Optional inline token_v2 cookie (overrides env var)
        token_env: Environment variable name containing the token_v2 cookie
        trust_env: Whether to respect system proxy settings
    """

    api_url: str = "https://www.notion.so/api/v3"
    timeout_seconds: float = 20.0
    retries: int = 2
    concurrency: int = 4
    chunk_limit: int = 100
    max_chunks: int = 10
    token: str | None = None
    token_env: str = "NOTION_TOKEN_V2"
    trust_env: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    site: SiteConfig = field(default_factory=SiteConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


@dataclass(frozen=True)
class SiteSettings:
    """Resolved site values handed to item and feed building."""

    title: str
    description: str
    link: str
    author: str
    language: str
    sub_path: str
    contact_email: str


_SECTIONS = {
    "site": SiteConfig,
    "defaults": DefaultsConfig,
    "content": ContentConfig,
    "feed": FeedConfig,
    "fetch": FetchConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config file {path}: top level must be a mapping")
    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict):
            known = {k: v for k, v in value.items() if k in data[key]}
            data[key].update(known)
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {name: dict(vars(getattr(cfg, name))) for name in _SECTIONS}


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTIONS.items()})


def resolve_site(cfg: AppConfig) -> SiteSettings:
    """Resolve each site value: site-specific value first, else the global default."""
    site, defaults = cfg.site, cfg.defaults

    def pick(name: str) -> str:
        value = getattr(site, name)
        if value is None or value == "":
            value = getattr(defaults, name)
        return str(value)

    return SiteSettings(
        title=pick("title"),
        description=pick("description"),
        link=pick("link").rstrip("/"),
        author=pick("author"),
        language=pick("lang"),
        sub_path=pick("sub_path").strip("/"),
        contact_email=pick("contact_email"),
    )


def get_notion_token(cfg: FetchConfig) -> str | None:
    """Get the token_v2 cookie from inline config or environment variable."""
    if cfg.token:
        return cfg.token
    return os.getenv(cfg.token_env)
