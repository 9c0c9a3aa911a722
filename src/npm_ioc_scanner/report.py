"""Report aggregation and schema-friendly output."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .models import RepoScanResult, VulnDatabase

REPORT_VERSION = "1"


def aggregate(
    results: Sequence[RepoScanResult],
    db: VulnDatabase,
    interrupted: bool = False,
) -> dict[str, Any]:
    """Aggregate per-repository results into a single schema-compatible report.

    Vulnerable findings are kept per file: a package present in both a
    manifest and its lockfile is listed twice, once per file.
    """
    repositories = [result.to_dict() for result in results]
    total_findings = sum(result.finding_count for result in results)

    report: dict[str, Any] = {
        "version": REPORT_VERSION,
        "hasFindings": total_findings > 0,
        "interrupted": interrupted,
        "repositories": repositories,
        "sources": [source.to_dict() for source in db.sources],
        "totals": {
            "repositories": len(results),
            "filesScanned": sum(result.files_scanned for result in results),
            "uniquePackages": sum(result.total_packages for result in results),
            "findings": total_findings,
            "vulnerablePackages": sum(len(result.vulnerable) for result in results),
            **db.totals(),
        },
    }

    return report
