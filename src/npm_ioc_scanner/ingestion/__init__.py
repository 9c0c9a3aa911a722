"""Loading indicator-of-compromise feeds into a vulnerability database."""

from .csv_feed import (
    DATADOG_IOC_URL,
    DEFAULT_IOC_URLS,
    WIZ_IOC_URL,
    FeedError,
    FeedFetchError,
    FeedParseError,
    HeaderAmbiguity,
    SourceUnavailable,
    WarningSink,
    expand_versions,
    fetch_csv,
    load_from_file,
    load_from_sources,
    load_from_url,
    load_source,
    parse_csv,
)
from .feeds_config import (
    ConfigError,
    FeedConfig,
    Settings,
    load_settings,
    parse_settings,
)

__all__ = [
    # CSV feeds
    "DATADOG_IOC_URL",
    "DEFAULT_IOC_URLS",
    "WIZ_IOC_URL",
    "FeedError",
    "FeedFetchError",
    "FeedParseError",
    "HeaderAmbiguity",
    "SourceUnavailable",
    "WarningSink",
    "expand_versions",
    "fetch_csv",
    "load_from_file",
    "load_from_sources",
    "load_from_url",
    "load_source",
    "parse_csv",
    # Configuration
    "ConfigError",
    "FeedConfig",
    "Settings",
    "load_settings",
    "parse_settings",
]
