"""npm-ioc-scanner core package.

Extracts (name, version) pairs from npm, pnpm and Yarn manifests and lockfiles
and matches them against indicator-of-compromise CSV feeds.
"""

__all__ = [
    "core",
    "ingestion",
    "matcher",
    "models",
    "parsers",
]
