"""Configuration management."""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

import yaml

from feed_aggregator.core.entities import Category

SOURCE_TYPES = ("rss", "api", "scraper")


class ConfigError(ValueError):
    """Static configuration problem; fatal at startup."""


def parse_category(value: Any) -> Category:
    try:
        return Category(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(c.value for c in Category)
        raise ConfigError(f"Unknown category '{value}' (expected one of: {valid})") from None


@dataclass
class CategoryConfig:
    """Per-category endpoint of a source."""
    category: Category
    endpoint: str
    max_items: int = 20
    refresh_minutes: int = 60

    @property
    def refresh_interval(self) -> timedelta:
        return timedelta(minutes=self.refresh_minutes)


@dataclass
class SourceConfig:
    """Source construction record."""
    id: str
    name: str
    type: str
    base_url: str
    categories: list[CategoryConfig] = field(default_factory=list)
    rate_limit: float = 30
    enabled: bool = True
    headers: dict[str, str] = field(default_factory=dict)

    def category_config(self, category: Category) -> Optional[CategoryConfig]:
        return next((c for c in self.categories if c.category == category), None)


@dataclass
class GlobalConfig:
    """Pipeline-wide settings."""
    max_items_per_feed: int = 50
    default_refresh_minutes: int = 60
    enabled_categories: list[Category] = field(default_factory=lambda: [Category.TECHNOLOGY])
    output_dir: Path = Path("feeds")
    docs_dir: Path = Path("docs")
    base_url: str = ""
    fetch_timeout: Optional[float] = 60.0
    language: str = "en"


@dataclass
class CacheConfig:
    """Cache file settings."""
    path: Path = Path("cache/news-cache.json")


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "14 days"


@dataclass
class Settings:
    """Application settings."""

    sources: list[SourceConfig] = field(default_factory=list)
    global_: GlobalConfig = field(default_factory=GlobalConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def enabled_sources(self) -> list[SourceConfig]:
        return [s for s in self.sources if s.enabled]

    @property
    def enabled_categories(self) -> list[Category]:
        return self.global_.enabled_categories

    @property
    def output_dir(self) -> Path:
        return self.global_.output_dir

    @property
    def docs_dir(self) -> Path:
        return self.global_.docs_dir

    @property
    def registry_path(self) -> Path:
        return self.global_.docs_dir / "feeds-registry.json"

    def source_by_id(self, source_id: str) -> Optional[SourceConfig]:
        return next((s for s in self.sources if s.id == source_id), None)


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    return data


def _parse_category_config(raw: dict, source_id: str, default_refresh: int) -> CategoryConfig:
    if not isinstance(raw, dict) or "category" not in raw:
        raise ConfigError(f"Invalid category entry for source {source_id}: {raw!r}")
    return CategoryConfig(
        category=parse_category(raw["category"]),
        endpoint=str(raw.get("endpoint", "")),
        max_items=int(raw.get("max_items", 20)),
        refresh_minutes=int(raw.get("refresh_minutes", default_refresh)),
    )


def _parse_source(raw: dict, default_refresh: int) -> SourceConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid source configuration: {raw!r}")

    missing = [key for key in ("id", "name", "type") if not raw.get(key)]
    if missing:
        raise ConfigError(f"Invalid source configuration {raw!r}: missing {', '.join(missing)}")

    source_id = str(raw["id"])
    if raw["type"] not in SOURCE_TYPES:
        raise ConfigError(f"Unsupported source type '{raw['type']}' for {source_id}")

    categories = raw.get("categories")
    if not isinstance(categories, list):
        raise ConfigError(f"Invalid source categories: {source_id}")

    return SourceConfig(
        id=source_id,
        name=str(raw["name"]),
        type=raw["type"],
        base_url=str(raw.get("base_url", "")),
        categories=[_parse_category_config(c, source_id, default_refresh) for c in categories],
        rate_limit=float(raw.get("rate_limit", 30)),
        enabled=bool(raw.get("enabled", True)),
        headers={str(k): str(v) for k, v in (raw.get("headers") or {}).items()},
    )


def get_settings(config_path: Optional[Path] = None) -> Settings:
    """Get application settings from YAML config and environment."""
    if config_path is None:
        config_path = Path(os.getenv("FEED_AGGREGATOR_CONFIG", "config.yaml"))

    config = load_config(config_path)
    settings = Settings()

    if "global" in config:
        for key, value in (config["global"] or {}).items():
            if not hasattr(settings.global_, key):
                raise ConfigError(f"Unknown global setting '{key}'")
            if key == "enabled_categories":
                value = [parse_category(c) for c in value]
            elif key in ("output_dir", "docs_dir"):
                value = Path(value)
            setattr(settings.global_, key, value)

    if "cache" in config:
        for key, value in (config["cache"] or {}).items():
            setattr(settings.cache, key, Path(value) if key == "path" else value)

    if "logging" in config:
        for key, value in (config["logging"] or {}).items():
            setattr(settings.logging, key, value)

    default_refresh = settings.global_.default_refresh_minutes
    settings.sources = [_parse_source(raw, default_refresh) for raw in config.get("sources") or []]

    seen_ids: set[str] = set()
    for source in settings.sources:
        if source.id in seen_ids:
            raise ConfigError(f"Duplicate source id '{source.id}'")
        seen_ids.add(source.id)

    log_level = os.getenv("FEED_AGGREGATOR_LOG_LEVEL")
    if log_level:
        settings.logging.level = log_level.upper()

    return settings
