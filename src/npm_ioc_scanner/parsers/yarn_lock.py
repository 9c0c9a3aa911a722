"""Parse a Yarn Classic (v1) yarn.lock to capture resolved dependencies.

The format is not YAML; it is scanned line by line. A non-indented line ending
in ``:`` declares an entry for one or more ranges of the same package::

    "@scope/pkg@^1.0.0", "@scope/pkg@~1.0.5":
      version "1.0.5"

Yarn Berry (v2+) lockfiles are rejected with :class:`UnsupportedFormatError`.
Classic lockfiles do not mark dev dependencies, so every record is non-dev.
"""

from __future__ import annotations

from enum import Enum

from ..models import PackageRecord
from .classifier import is_yarn_berry
from .errors import UnsupportedFormatError

_NPM_ALIAS = "@npm:"


class ScanState(Enum):
    OUTSIDE_ENTRY = "outside"
    INSIDE_ENTRY = "inside"


def _trim_quotes(value: str) -> str:
    for quote in ('"', "'"):
        if len(value) >= 2 and value.startswith(quote) and value.endswith(quote):
            return value[1:-1]
    return value


def extract_package_name(entry: str) -> str:
    """Return the package name of one declaration alias.

    ``pkg@^1.0.0`` -> ``pkg``; ``@scope/pkg@^1.0.0`` -> ``@scope/pkg``;
    ``alias@npm:real@1.0.0`` -> ``alias``.
    """
    if _NPM_ALIAS in entry:
        entry = entry.split(_NPM_ALIAS, 1)[0]

    if entry.startswith("@"):
        idx = entry.find("@", 1)
        return entry[:idx] if idx > 0 else entry

    return entry.split("@", 1)[0]


def parse_declaration(trimmed: str) -> list[str]:
    """Return the unique package names of a declaration line, in order."""
    names: list[str] = []
    for alias in trimmed.removesuffix(":").split(","):
        name = extract_package_name(_trim_quotes(alias.strip()))
        if name and name not in names:
            names.append(name)
    return names


def parse_version_line(trimmed: str) -> str | None:
    """Return the version of a ``version "1.0.0"`` line, or None for other fields."""
    parts = trimmed.split(None, 1)
    if len(parts) != 2 or parts[0] != "version":
        return None
    return parts[1].strip().strip("\"'")


def _is_declaration(line: str, trimmed: str) -> bool:
    return not line.startswith((" ", "\t")) and trimmed.endswith(":")


class YarnLockScanner:
    """Two-state line scanner collecting one record per (alias name, version)."""

    def __init__(self) -> None:
        self.state = ScanState.OUTSIDE_ENTRY
        self.records: list[PackageRecord] = []
        self._seen: set[str] = set()
        self._names: list[str] = []
        self._version = ""

    def feed(self, line: str) -> None:
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            return

        if _is_declaration(line, trimmed):
            self._finish_entry()
            self._names = parse_declaration(trimmed)
            self._version = ""
            self.state = ScanState.INSIDE_ENTRY
            return

        if self.state is ScanState.INSIDE_ENTRY:
            version = parse_version_line(trimmed)
            if version is not None:
                self._version = version

    def close(self) -> list[PackageRecord]:
        self._finish_entry()
        self.state = ScanState.OUTSIDE_ENTRY
        return self.records

    def _finish_entry(self) -> None:
        if self.state is not ScanState.INSIDE_ENTRY:
            return
        for name in self._names:
            record = PackageRecord.build(name, self._version)
            if record is None or record.key in self._seen:
                continue
            self._seen.add(record.key)
            self.records.append(record)
        self._names = []
        self._version = ""


def parse(content: str, include_dev: bool = True) -> list[PackageRecord]:
    """Return list of package records from a classic yarn lock file.

    ``include_dev`` is accepted for a uniform parser signature; classic
    lockfiles carry no dev marker.
    """
    if is_yarn_berry(content):
        raise UnsupportedFormatError(
            "yarn.lock appears to be Yarn Berry (v2+) format, which is not supported; "
            "only Yarn Classic (v1) lockfiles can be scanned"
        )

    scanner = YarnLockScanner()
    for line in content.splitlines():
        scanner.feed(line)
    return scanner.close()
