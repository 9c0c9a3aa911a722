"""Local checkout discovery: turn a directory into package and workflow files."""

from __future__ import annotations

import logging
from pathlib import Path

from .models import PackageFile, WorkflowFile
from .parsers import is_supported_name

logger = logging.getLogger(__name__)

EXCLUDES = {"node_modules", ".git", ".venv"}
WORKFLOW_DIR = Path(".github") / "workflows"
WORKFLOW_SUFFIXES = {".yml", ".yaml"}


def _should_skip(relative: Path) -> bool:
    parts = set(relative.parts)
    return any(ex in parts for ex in EXCLUDES)


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return None


def discover_manifests(root: Path) -> list[Path]:
    """Find dependency manifests recursively under root (excluding vendor dirs).

    Targets include: package.json, package-lock.json, npm-shrinkwrap.json,
    pnpm-lock.yaml, yarn.lock
    """
    root = root.resolve()
    found: list[Path] = []

    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if not is_supported_name(path):
            continue
        if _should_skip(path.relative_to(root)):
            continue
        found.append(path)

    return found


def load_package_files(root: Path, repo_name: str | None = None) -> list[PackageFile]:
    """Read every manifest under ``root`` as (repository, relative path, text)."""
    root = root.resolve()
    repo = repo_name or root.name
    files: list[PackageFile] = []
    for path in discover_manifests(root):
        content = _read(path)
        if content is None:
            continue
        files.append(
            PackageFile(repo_name=repo, path=path.relative_to(root).as_posix(), content=content)
        )
    return files


def load_workflow_files(root: Path, repo_name: str | None = None) -> list[WorkflowFile]:
    """Read the CI workflow definitions of a checkout."""
    root = root.resolve()
    repo = repo_name or root.name
    workflow_dir = root / WORKFLOW_DIR
    if not workflow_dir.is_dir():
        return []

    workflows: list[WorkflowFile] = []
    for path in sorted(workflow_dir.iterdir()):
        if not path.is_file() or path.suffix not in WORKFLOW_SUFFIXES:
            continue
        content = _read(path)
        if content is None:
            continue
        workflows.append(
            WorkflowFile(repo_name=repo, path=path.relative_to(root).as_posix(), content=content)
        )
    return workflows
