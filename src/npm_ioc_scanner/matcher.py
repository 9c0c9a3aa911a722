"""Match extracted packages against the IOC database and scan for worm signatures."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import PurePosixPath

from .models import (
    BranchInfo,
    MaliciousBranchFinding,
    MaliciousRepoFinding,
    MaliciousScriptFinding,
    MaliciousWorkflowFinding,
    PackageFile,
    PackageRecord,
    RepoScanResult,
    RepositoryInfo,
    VulnDatabase,
    VulnerableFinding,
    WorkflowFile,
)
from .parsers import ParseError, UnsupportedFormatError, parse_file
from .parsers.package_json import extract_scripts

logger = logging.getLogger(__name__)

# Shai-Hulud indicators
MALICIOUS_WORKFLOW_PATTERN = "echo ${{ github.event.discussion.body }}"

MALICIOUS_SCRIPT_PATTERNS = (
    "node bundle.js",
    "setup_bun.js",
    "bun_environment.js",
)

LIFECYCLE_SCRIPTS = (
    "preinstall",
    "install",
    "postinstall",
    "preuninstall",
    "uninstall",
    "postuninstall",
    "prepublish",
    "preprepare",
    "prepare",
    "postprepare",
)

MALICIOUS_REPO_DESCRIPTION = "Shai-Hulud Migration"
MALICIOUS_REPO_SUFFIX = "-migration"
MALICIOUS_BRANCH_NAME = "shai-hulud"


def _is_manifest(path: str) -> bool:
    return PurePosixPath(path.replace("\\", "/")).name == "package.json"


def check_workflows(workflows: Iterable[WorkflowFile]) -> list[MaliciousWorkflowFinding]:
    """Return one finding per workflow body containing the worm signature."""
    return [
        MaliciousWorkflowFinding(
            file_path=workflow.path,
            repo_name=workflow.repo_name,
            pattern=MALICIOUS_WORKFLOW_PATTERN,
        )
        for workflow in workflows
        if MALICIOUS_WORKFLOW_PATTERN in workflow.content
    ]


def check_package_scripts(files: Iterable[PackageFile]) -> list[MaliciousScriptFinding]:
    """Check lifecycle scripts of every package.json for known payloads.

    A script matching several patterns yields one finding per pattern.
    """
    findings: list[MaliciousScriptFinding] = []
    for file in files:
        if not _is_manifest(file.path):
            continue

        scripts = extract_scripts(file.content)
        for script_name in LIFECYCLE_SCRIPTS:
            command = scripts.get(script_name)
            if command is None:
                continue
            for pattern in MALICIOUS_SCRIPT_PATTERNS:
                if pattern in command:
                    findings.append(
                        MaliciousScriptFinding(
                            file_path=file.path,
                            repo_name=file.repo_name,
                            script_name=script_name,
                            command=command,
                            pattern=pattern,
                        )
                    )
    return findings


def is_malicious_migration_repo(repo: RepositoryInfo) -> bool:
    return (
        repo.name.lower().endswith(MALICIOUS_REPO_SUFFIX)
        and repo.description == MALICIOUS_REPO_DESCRIPTION
    )


def find_malicious_repos(repos: Iterable[RepositoryInfo]) -> list[MaliciousRepoFinding]:
    return [
        MaliciousRepoFinding(repo_name=repo.full_name, description=repo.description)
        for repo in repos
        if is_malicious_migration_repo(repo)
    ]


def find_malicious_branches(branches: Iterable[BranchInfo]) -> list[MaliciousBranchFinding]:
    return [
        MaliciousBranchFinding(repo_name=branch.repo_name, branch_name=branch.name)
        for branch in branches
        if branch.name.lower() == MALICIOUS_BRANCH_NAME
    ]


class Scanner:
    """Exact (name, version) matcher over the files of one repository."""

    def __init__(self, db: VulnDatabase, include_dev: bool = True) -> None:
        self.db = db
        self.include_dev = include_dev

    def parse(self, file: PackageFile) -> list[PackageRecord]:
        return parse_file(file.path, file.content, self.include_dev)

    def match(self, file: PackageFile, records: Iterable[PackageRecord]) -> list[VulnerableFinding]:
        findings: list[VulnerableFinding] = []
        for record in records:
            entry = self.db.check(record.name, record.version)
            if entry is not None:
                findings.append(
                    VulnerableFinding(
                        package=record,
                        entry=entry,
                        file_path=file.path,
                        repo_name=file.repo_name,
                    )
                )
        return findings

    def scan_files(self, files: Iterable[PackageFile]) -> RepoScanResult:
        """Scan package files of one repository.

        A file that fails to parse is recorded and skipped; the others are
        still matched. The same vulnerable package is reported once per file.
        """
        files = list(files)
        if not files:
            return RepoScanResult()

        result = RepoScanResult(repo_name=files[0].repo_name, files_scanned=len(files))
        seen: set[str] = set()

        for file in files:
            try:
                records = self.parse(file)
            except UnsupportedFormatError as exc:
                logger.info("Skipping %s: %s", file.path, exc)
                result.unsupported[file.path] = str(exc)
                continue
            except ParseError as exc:
                logger.warning("Failed to parse %s: %s", file.path, exc)
                result.parse_errors[file.path] = str(exc)
                continue

            seen.update(record.key for record in records)
            result.vulnerable.extend(self.match(file, records))

        result.total_packages = len(seen)
        result.malicious_scripts = check_package_scripts(files)
        return result

    def scan_repository(
        self,
        files: Iterable[PackageFile],
        workflows: Iterable[WorkflowFile] = (),
        branches: Iterable[BranchInfo] = (),
    ) -> RepoScanResult:
        """Run every per-repository check over what the content source supplied."""
        result = self.scan_files(files)
        result.malicious_workflows = check_workflows(workflows)
        result.malicious_branches = find_malicious_branches(branches)
        if not result.repo_name:
            named = [*result.malicious_workflows, *result.malicious_branches]
            if named:
                result.repo_name = named[0].repo_name
        return result
