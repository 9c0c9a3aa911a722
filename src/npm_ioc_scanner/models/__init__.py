"""Data models shared by the parsers, loader and match engine."""

from __future__ import annotations

from .findings import (
    MaliciousBranchFinding,
    MaliciousRepoFinding,
    MaliciousScriptFinding,
    MaliciousWorkflowFinding,
    RepoScanResult,
    VulnerableFinding,
)
from .package_record import Origin, PackageRecord
from .source_files import BranchInfo, PackageFile, RepositoryInfo, WorkflowFile
from .source_snapshot import SourceSnapshot
from .vuln_database import VulnDatabase, VulnEntry

__all__ = [
    "BranchInfo",
    "MaliciousBranchFinding",
    "MaliciousRepoFinding",
    "MaliciousScriptFinding",
    "MaliciousWorkflowFinding",
    "Origin",
    "PackageFile",
    "PackageRecord",
    "RepoScanResult",
    "RepositoryInfo",
    "SourceSnapshot",
    "VulnDatabase",
    "VulnEntry",
    "VulnerableFinding",
    "WorkflowFile",
]
