"""Parse npm package-lock.json / npm-shrinkwrap.json to capture resolved dependencies."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from ..models import Origin, PackageRecord
from .base import load_json_object
from .classifier import NpmLockfileGeneration, npm_lockfile_generations

_NODE_MODULES = "node_modules/"
_NESTED_NODE_MODULES = "/node_modules/"


@dataclass(frozen=True)
class LockfilePackage:
    """An entry of the v2/v3 ``packages`` map."""

    version: str = ""
    dev: bool = False
    optional: bool = False
    link: bool = False

    @classmethod
    def from_mapping(cls, data: Any) -> LockfilePackage | None:
        if not isinstance(data, dict):
            return None
        version = data.get("version")
        return cls(
            version=version if isinstance(version, str) else "",
            dev=data.get("dev") is True,
            optional=data.get("optional") is True,
            link=data.get("link") is True,
        )


@dataclass(frozen=True)
class LegacyLockEntry:
    """An entry of the v1 ``dependencies`` tree.

    Nested entries are validated lazily by :meth:`children`.
    """

    version: str = ""
    dev: bool = False
    optional: bool = False
    dependencies: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Any) -> LegacyLockEntry | None:
        if not isinstance(data, dict):
            return None
        version = data.get("version")
        nested = data.get("dependencies")
        return cls(
            version=version if isinstance(version, str) else "",
            dev=data.get("dev") is True,
            optional=data.get("optional") is True,
            dependencies=nested if isinstance(nested, dict) else {},
        )

    def children(self) -> Iterator[tuple[str, LegacyLockEntry]]:
        yield from _legacy_entries(self.dependencies)


def _legacy_entries(raw: dict[str, Any]) -> Iterator[tuple[str, LegacyLockEntry]]:
    for name, data in raw.items():
        entry = LegacyLockEntry.from_mapping(data)
        if entry is not None:
            yield name, entry


def extract_package_name(package_path: str) -> str:
    """Recover a package name from a ``packages`` map key.

    ``node_modules/lodash`` -> ``lodash``
    ``node_modules/@types/node`` -> ``@types/node``
    ``node_modules/foo/node_modules/bar`` -> ``bar``
    """
    path = package_path.removeprefix(_NODE_MODULES)
    last = path.split(_NESTED_NODE_MODULES)[-1]

    if last.startswith("@"):
        segments = last.split("/", 2)
        if len(segments) >= 2:
            return f"{segments[0]}/{segments[1]}"

    return last.split("/", 1)[0]


def is_installed_path(package_path: str) -> bool:
    """True for keys under node_modules; workspace folders such as ``packages/a`` are not."""
    return package_path.startswith(_NODE_MODULES) or _NESTED_NODE_MODULES in package_path


def _parse_packages_map(
    packages: dict[str, Any],
    include_dev: bool,
    seen: set[str],
    records: list[PackageRecord],
) -> None:
    for package_path, data in packages.items():
        if not is_installed_path(package_path):
            continue

        entry = LockfilePackage.from_mapping(data)
        if entry is None or entry.link:
            continue
        if entry.dev and not include_dev:
            continue

        record = PackageRecord.build(
            extract_package_name(package_path),
            entry.version,
            is_dev=entry.dev,
            origin=Origin.TRANSITIVE,
        )
        if record is None or record.key in seen:
            continue
        seen.add(record.key)
        records.append(record)


def _parse_dependency_tree(
    dependencies: dict[str, Any],
    include_dev: bool,
    seen: set[str],
    records: list[PackageRecord],
) -> None:
    # Depth-first, parents before children; iterative so deep trees cannot
    # exhaust the interpreter stack.
    stack = [_legacy_entries(dependencies)]
    while stack:
        try:
            name, entry = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue

        if entry.dev and not include_dev:
            continue

        record = PackageRecord.build(
            name, entry.version, is_dev=entry.dev, origin=Origin.TRANSITIVE
        )
        if record is not None and record.key not in seen:
            seen.add(record.key)
            records.append(record)

        if entry.dependencies:
            stack.append(entry.children())


def parse(content: str, include_dev: bool = True) -> list[PackageRecord]:
    """Return transitive dependency records from a lockfile.

    Supports npm v1 ("dependencies" tree) and v2+ ("packages" map); when both
    are present, both are read and deduplicated together.
    """
    data = load_json_object(content, "package-lock.json")

    seen: set[str] = set()
    records: list[PackageRecord] = []

    for generation in npm_lockfile_generations(data):
        if generation is NpmLockfileGeneration.PACKAGES_MAP:
            _parse_packages_map(data["packages"], include_dev, seen, records)
        elif generation is NpmLockfileGeneration.DEPENDENCY_TREE:
            _parse_dependency_tree(data["dependencies"], include_dev, seen, records)

    return records
