"""In-memory indicator database with exact name@version lookups."""

from __future__ import annotations

from dataclasses import dataclass

from .source_snapshot import SourceSnapshot


@dataclass(frozen=True)
class VulnEntry:
    """A single known-bad package version.

    ``original_spec`` keeps the version cell as authored in the source CSV,
    which may list several versions.
    """

    package_name: str
    package_version: str
    original_spec: str

    @property
    def key(self) -> str:
        return f"{self.package_name}@{self.package_version}"

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.package_name,
            "version": self.package_version,
            "originalSpec": self.original_spec,
        }


class VulnDatabase:
    """Exact-match index of compromised package versions.

    ``total_entries`` counts every insertion, duplicates included, so raw
    source volume can be reported apart from unique coverage.
    """

    def __init__(self) -> None:
        self._entries: dict[str, VulnEntry] = {}
        self._by_name: dict[str, list[VulnEntry]] = {}
        self._total_entries = 0
        self.sources: list[SourceSnapshot] = []

    def add(self, entry: VulnEntry) -> None:
        self._total_entries += 1
        if entry.key in self._entries:
            return
        self._entries[entry.key] = entry
        self._by_name.setdefault(entry.package_name, []).append(entry)

    def check(self, name: str, version: str) -> VulnEntry | None:
        """Return the entry when both name and version match exactly."""
        if not name or not version:
            return None
        return self._entries.get(f"{name}@{version}")

    def vulnerable_versions(self, name: str) -> list[str]:
        return [entry.package_version for entry in self._by_name.get(name, [])]

    def entries_for(self, name: str) -> list[VulnEntry]:
        return list(self._by_name.get(name, []))

    def merge(self, other: VulnDatabase | None) -> None:
        """Fold another database into this one.

        Unique entries are inserted idempotently; the processed counter grows
        by everything the other database processed.
        """
        if other is None:
            return
        for entry in other._entries.values():
            if entry.key not in self._entries:
                self._entries[entry.key] = entry
                self._by_name.setdefault(entry.package_name, []).append(entry)
        self._total_entries += other._total_entries
        self.sources.extend(other.sources)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def unique_packages(self) -> int:
        return len(self._by_name)

    @property
    def total_entries(self) -> int:
        return self._total_entries

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def totals(self) -> dict[str, int]:
        return {
            "iocEntries": self.total_entries,
            "uniqueIocEntries": self.size,
            "iocPackages": self.unique_packages,
        }
