#!/usr/bin/env python3
"""Local CLI entrypoint to scan checked-out repositories.

Usage:
  python scripts/scan.py [ROOT ...] [--list path_or_url ...] [--skip-dev] [--warn-only]

Exit status 10 signals findings unless --warn-only (or
NPM_IOC_SCANNER_WARN_ONLY) is set.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from npm_ioc_scanner.core import scan_repositories
from npm_ioc_scanner.ingestion import ConfigError, SourceUnavailable
from npm_ioc_scanner.log import setup_logging
from npm_ioc_scanner.summary import render_summary


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("roots", nargs="*", type=Path, default=[Path(".")])
    parser.add_argument(
        "--list",
        dest="list_sources",
        action="append",
        default=None,
        help="IOC CSV URL or path; repeat for several sources",
    )
    parser.add_argument("--config", type=Path, default=None, help="Feeds settings.json")
    parser.add_argument("--skip-dev", action="store_true")
    parser.add_argument("--warn-only", action="store_true")
    parser.add_argument("--summary", action="store_true", help="Print Markdown instead of JSON")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    try:
        report = scan_repositories(
            args.roots,
            list_sources=args.list_sources,
            include_dev=False if args.skip_dev else None,
            config_path=args.config,
        )
    except (SourceUnavailable, ConfigError) as exc:
        print(f"ERROR: failed to load vulnerability database: {exc}", file=sys.stderr)
        return 1

    if args.summary:
        print(render_summary(report), end="")
    else:
        print(json.dumps(report, indent=2))

    has_findings = bool(report.get("hasFindings"))

    # Default behavior: fail on findings unless env override set or --warn-only
    if has_findings and not args.warn_only:
        warn_env = os.getenv("NPM_IOC_SCANNER_WARN_ONLY", "").strip().lower()
        if warn_env in {"1", "true", "yes", "y"}:
            return 0
        return 10

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
