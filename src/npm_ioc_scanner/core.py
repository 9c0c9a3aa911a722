"""Core scanning entrypoints.

This module MUST NOT contain CLI or rendering concerns so it can be driven by
the local script as well as by an external content source.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from .discovery import load_package_files, load_workflow_files
from .ingestion import (
    DEFAULT_IOC_URLS,
    ConfigError,
    WarningSink,
    load_from_sources,
    load_settings,
)
from .matcher import Scanner
from .models import RepoScanResult, VulnDatabase
from .report import aggregate

logger = logging.getLogger(__name__)

SKIP_DEV_ENV = "NPM_IOC_SCANNER_SKIP_DEV"
_TRUTHY = {"1", "true", "yes", "y"}


def env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def resolve_sources(
    list_sources: Sequence[str] | None = None,
    config_path: Path | str | None = None,
) -> list[str]:
    """Pick IOC sources: explicit list, then the feeds config, then the defaults."""
    if list_sources:
        return list(list_sources)

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        if config_path is not None:
            raise
        logger.debug("No feeds configuration (%s); using default IOC sources", exc)
        return list(DEFAULT_IOC_URLS)

    return settings.enabled_sources()


def load_database(
    list_sources: Sequence[str] | None = None,
    config_path: Path | str | None = None,
    on_warning: WarningSink | None = None,
) -> VulnDatabase:
    sources = resolve_sources(list_sources, config_path)
    logger.info("Loading IOC database from %d source(s)", len(sources))
    db = load_from_sources(sources, on_warning)
    logger.info(
        "Loaded %d IOC entries (%d unique packages, %d vulnerable versions)",
        db.total_entries,
        db.unique_packages,
        db.size,
    )
    return db


def scan_checkout(root: Path, scanner: Scanner, repo_name: str | None = None) -> RepoScanResult:
    """Scan one local checkout with an already-built scanner."""
    root = root.resolve()
    files = load_package_files(root, repo_name)
    workflows = load_workflow_files(root, repo_name)
    result = scanner.scan_repository(files, workflows)
    if not result.repo_name:
        result.repo_name = repo_name or root.name
    return result


def scan_repositories(
    roots: Iterable[Path],
    list_sources: Sequence[str] | None = None,
    include_dev: bool | None = None,
    config_path: Path | str | None = None,
    on_warning: WarningSink | None = None,
    db: VulnDatabase | None = None,
    should_stop: Callable[[], bool] | None = None,
) -> dict[str, Any]:
    """Scan several checkouts one after another and return the aggregated report.

    ``should_stop`` is polled between repositories; when it returns True the
    results gathered so far are reported and the report is marked interrupted.
    """
    if include_dev is None:
        include_dev = not env_flag(SKIP_DEV_ENV)
    if db is None:
        db = load_database(list_sources, config_path, on_warning)

    scanner = Scanner(db, include_dev=include_dev)
    results: list[RepoScanResult] = []
    interrupted = False

    roots = list(roots)
    for index, root in enumerate(roots, start=1):
        if should_stop is not None and should_stop():
            logger.info("Scan interrupted, reporting partial results")
            interrupted = True
            break
        logger.info("[%d/%d] Scanning %s", index, len(roots), root)
        results.append(scan_checkout(Path(root), scanner))

    return aggregate(results, db, interrupted=interrupted)


def scan_repository(
    root: Path,
    list_sources: Sequence[str] | None = None,
    include_dev: bool | None = None,
    config_path: Path | str | None = None,
    on_warning: WarningSink | None = None,
    db: VulnDatabase | None = None,
) -> dict[str, Any]:
    """Scan a single local repository for compromised packages.

    Params:
        root: repository root to scan
        list_sources: optional IOC CSV URLs or filesystem paths; when None the
            feeds configuration (or the built-in defaults) is used
        include_dev: include devDependencies; defaults to the inverse of
            NPM_IOC_SCANNER_SKIP_DEV
        db: a pre-loaded database, skipping source loading entirely

    Returns: dict report matching report.schema.json
    """
    return scan_repositories(
        [root],
        list_sources=list_sources,
        include_dev=include_dev,
        config_path=config_path,
        on_warning=on_warning,
        db=db,
    )
