"""Inputs supplied by a content source (local checkout or remote API)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PackageFile:
    """A dependency manifest or lockfile pulled from a repository."""

    repo_name: str
    path: str
    content: str


@dataclass(frozen=True)
class WorkflowFile:
    """A CI workflow definition pulled from a repository."""

    repo_name: str
    path: str
    content: str


@dataclass(frozen=True)
class RepositoryInfo:
    full_name: str
    name: str
    description: str = ""
    archived: bool = False


@dataclass(frozen=True)
class BranchInfo:
    repo_name: str
    name: str
