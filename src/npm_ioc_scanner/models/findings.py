"""Findings produced by the match engine and pattern detectors."""

from __future__ import annotations

from dataclasses import dataclass, field

from .package_record import PackageRecord
from .vuln_database import VulnEntry


@dataclass(frozen=True)
class VulnerableFinding:
    """A package record that exactly matches a known-bad version."""

    package: PackageRecord
    entry: VulnEntry
    file_path: str
    repo_name: str

    def to_dict(self) -> dict[str, object]:
        return {
            "package": self.package.name,
            "installed": self.package.version,
            "isDev": self.package.is_dev,
            "origin": self.package.origin.value,
            "compromised": self.entry.original_spec,
            "file": self.file_path,
            "repository": self.repo_name,
        }


@dataclass(frozen=True)
class MaliciousScriptFinding:
    """A lifecycle script containing a known worm payload."""

    file_path: str
    repo_name: str
    script_name: str
    command: str
    pattern: str

    def to_dict(self) -> dict[str, str]:
        return {
            "file": self.file_path,
            "repository": self.repo_name,
            "script": self.script_name,
            "command": self.command,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class MaliciousWorkflowFinding:
    file_path: str
    repo_name: str
    pattern: str

    def to_dict(self) -> dict[str, str]:
        return {
            "file": self.file_path,
            "repository": self.repo_name,
            "pattern": self.pattern,
        }


@dataclass(frozen=True)
class MaliciousRepoFinding:
    repo_name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"repository": self.repo_name, "description": self.description}


@dataclass(frozen=True)
class MaliciousBranchFinding:
    repo_name: str
    branch_name: str

    def to_dict(self) -> dict[str, str]:
        return {"repository": self.repo_name, "branch": self.branch_name}


@dataclass
class RepoScanResult:
    """Everything found while scanning the files of one repository."""

    repo_name: str = ""
    files_scanned: int = 0
    total_packages: int = 0
    vulnerable: list[VulnerableFinding] = field(default_factory=list)
    malicious_scripts: list[MaliciousScriptFinding] = field(default_factory=list)
    malicious_workflows: list[MaliciousWorkflowFinding] = field(default_factory=list)
    malicious_branches: list[MaliciousBranchFinding] = field(default_factory=list)
    parse_errors: dict[str, str] = field(default_factory=dict)
    unsupported: dict[str, str] = field(default_factory=dict)

    @property
    def has_issues(self) -> bool:
        return bool(
            self.vulnerable
            or self.malicious_scripts
            or self.malicious_workflows
            or self.malicious_branches
        )

    @property
    def finding_count(self) -> int:
        return (
            len(self.vulnerable)
            + len(self.malicious_scripts)
            + len(self.malicious_workflows)
            + len(self.malicious_branches)
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "repository": self.repo_name,
            "filesScanned": self.files_scanned,
            "uniquePackages": self.total_packages,
            "findings": [finding.to_dict() for finding in self.vulnerable],
            "maliciousScripts": [finding.to_dict() for finding in self.malicious_scripts],
            "maliciousWorkflows": [finding.to_dict() for finding in self.malicious_workflows],
            "maliciousBranches": [finding.to_dict() for finding in self.malicious_branches],
            "parseErrors": dict(self.parse_errors),
            "unsupportedFiles": dict(self.unsupported),
        }
