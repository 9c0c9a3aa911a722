"""Select a parser for a file from its name and, where needed, its content."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import PurePath, PurePosixPath
from typing import Any


class FileFormat(Enum):
    MANIFEST = "manifest"
    NPM_LOCKFILE = "npm-lockfile"
    PNPM_LOCKFILE = "pnpm-lockfile"
    YARN_CLASSIC_LOCKFILE = "yarn-classic-lockfile"
    YARN_BERRY_LOCKFILE = "yarn-berry-lockfile"
    UNKNOWN = "unknown"


class NpmLockfileGeneration(Enum):
    """Layouts of package-lock.json / npm-shrinkwrap.json."""

    PACKAGES_MAP = "packages"  # lockfileVersion 2 and 3
    DEPENDENCY_TREE = "dependencies"  # lockfileVersion 1


FILE_NAMES: dict[str, FileFormat] = {
    "package.json": FileFormat.MANIFEST,
    "package-lock.json": FileFormat.NPM_LOCKFILE,
    "npm-shrinkwrap.json": FileFormat.NPM_LOCKFILE,
    "pnpm-lock.yaml": FileFormat.PNPM_LOCKFILE,
    "yarn.lock": FileFormat.YARN_CLASSIC_LOCKFILE,
}

YARN_BERRY_METADATA = "__metadata:"
_NPM_PROTOCOL = "@npm:"
_RANGE_START = frozenset("^~><=0123456789")


def _basename(path: str | PurePath) -> str:
    if isinstance(path, PurePath):
        return path.name
    return PurePosixPath(path.replace("\\", "/")).name


def is_supported_name(path: str | PurePath) -> bool:
    return _basename(path) in FILE_NAMES


def _has_berry_npm_range(trimmed: str) -> bool:
    """True for ``pkg@npm:^1.0.0:`` but not for the classic alias ``a@npm:b@1.0.0:``."""
    idx = trimmed.find(_NPM_PROTOCOL)
    if idx < 0:
        return False
    rest = trimmed[idx + len(_NPM_PROTOCOL) :]
    return bool(rest) and rest[0] in _RANGE_START


def is_yarn_berry(content: str) -> bool:
    """Detect the Yarn 2+ lockfile dialect, which the classic scanner cannot read."""
    if YARN_BERRY_METADATA in content:
        return True

    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        if trimmed.endswith(":") and _has_berry_npm_range(trimmed):
            return True

    return False


def classify(path: str | PurePath, content: str | None = None) -> FileFormat:
    """Return the format of a file.

    The file name picks the family. For ``yarn.lock`` the content, when given,
    separates the classic dialect from Yarn Berry.
    """
    file_format = FILE_NAMES.get(_basename(path), FileFormat.UNKNOWN)
    if (
        file_format is FileFormat.YARN_CLASSIC_LOCKFILE
        and content is not None
        and is_yarn_berry(content)
    ):
        return FileFormat.YARN_BERRY_LOCKFILE
    return file_format


def npm_lockfile_generations(document: Mapping[str, Any]) -> tuple[NpmLockfileGeneration, ...]:
    """Return the populated layouts of a decoded npm lockfile, packages map first."""
    found: list[NpmLockfileGeneration] = []
    packages = document.get("packages")
    if isinstance(packages, Mapping) and packages:
        found.append(NpmLockfileGeneration.PACKAGES_MAP)
    dependencies = document.get("dependencies")
    if isinstance(dependencies, Mapping) and dependencies:
        found.append(NpmLockfileGeneration.DEPENDENCY_TREE)
    return tuple(found)
