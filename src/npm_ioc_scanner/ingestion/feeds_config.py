"""IOC feed configuration (``settings.json``).

The file lists the indicator sources to load::

    {"feeds": [{"id": "datadog", "url": "https://...", "enabled": true}]}

``url`` is either an http(s) URL or a path to a local CSV file; relative
paths are resolved against the directory holding the settings file.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "settings.json"
CONFIG_PATH_ENV_VAR = "NPM_IOC_SCANNER_FEEDS_CONFIG"

SETTINGS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["feeds"],
    "properties": {
        "feeds": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "url"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "url": {"type": "string", "minLength": 1},
                    "enabled": {"type": "boolean"},
                    "description": {"type": "string"},
                },
            },
        }
    },
}

_VALIDATOR = Draft202012Validator(SETTINGS_SCHEMA)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""


@dataclass(slots=True, frozen=True)
class FeedConfig:
    id: str
    url: str
    enabled: bool = True
    description: str = ""

    @property
    def is_remote(self) -> bool:
        return self.url.startswith(("http://", "https://"))

    def location(self, base_dir: Path | None = None) -> str:
        """The source string handed to the loader."""
        if self.is_remote or base_dir is None or Path(self.url).is_absolute():
            return self.url
        return str(base_dir / self.url)


@dataclass(slots=True, frozen=True)
class Settings:
    feeds: tuple[FeedConfig, ...]
    base_dir: Path | None = None

    def enabled(self) -> list[FeedConfig]:
        return [feed for feed in self.feeds if feed.enabled]

    def feed(self, feed_id: str) -> FeedConfig | None:
        return next((feed for feed in self.feeds if feed.id == feed_id), None)

    def enabled_sources(self) -> list[str]:
        return [feed.location(self.base_dir) for feed in self.enabled()]


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Explicit argument, then $NPM_IOC_SCANNER_FEEDS_CONFIG, then the repo default."""
    if path is not None:
        return Path(path)
    return Path(os.environ.get(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_PATH)


def parse_settings(data: Any, base_dir: Path | None = None) -> Settings:
    """Validate an already-decoded settings document.

    Raises:
        ConfigError: listing every schema violation, a duplicated feed id, or
            a configuration with every feed disabled.
    """
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        details = "; ".join(
            f"{'/'.join(str(p) for p in error.path) or '<root>'}: {error.message}"
            for error in errors
        )
        raise ConfigError(f"invalid feeds configuration: {details}")

    feeds = tuple(
        FeedConfig(
            id=item["id"],
            url=item["url"],
            enabled=item.get("enabled", True),
            description=item.get("description", ""),
        )
        for item in data["feeds"]
    )

    ids = [feed.id for feed in feeds]
    duplicates = sorted({feed_id for feed_id in ids if ids.count(feed_id) > 1})
    if duplicates:
        raise ConfigError(f"duplicate feed id(s): {', '.join(duplicates)}")

    settings = Settings(feeds=feeds, base_dir=base_dir)
    if not settings.enabled():
        raise ConfigError("at least one feed must be enabled")
    return settings


def load_settings(path: Path | str | None = None) -> Settings:
    config_path = resolve_config_path(path)
    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read feeds configuration {config_path}: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {config_path}: {exc}") from exc

    settings = parse_settings(data, base_dir=config_path.resolve().parent)
    logger.debug(
        "Loaded %d feed(s) from %s (%d enabled)",
        len(settings.feeds),
        config_path,
        len(settings.enabled()),
    )
    return settings
