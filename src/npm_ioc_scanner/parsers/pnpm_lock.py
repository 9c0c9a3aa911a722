"""Parse pnpm-lock.yaml to capture resolved dependencies."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml

from ..models import PackageRecord
from .errors import StructuralParseError

# An unscoped name ends at the first "@" (pkg@1.0.0) or "/" (pkg/1.0.0).
_NAME_VERSION = re.compile(r"^(?P<name>[^@/]+)[@/](?P<version>.+)$")


@dataclass(frozen=True)
class PnpmPackage:
    """An entry of the ``packages`` map; only the dev flag is needed."""

    dev: bool = False
    optional: bool = False

    @classmethod
    def from_mapping(cls, data: Any) -> PnpmPackage | None:
        if data is None:
            return cls()
        if not isinstance(data, dict):
            return None
        return cls(dev=data.get("dev") is True, optional=data.get("optional") is True)


def strip_peer_suffix(version: str) -> str:
    """Remove peer-dependency decorations from a pnpm version.

    ``1.0.0(peer@2.0.0)(other@1.0.0)`` -> ``1.0.0``
    ``1.0.0_peer@2.0.0`` -> ``1.0.0``
    ``1.0.0-beta_1`` is left alone: an underscore only starts a suffix when an
    ``@`` follows it.
    """
    idx = version.find("(")
    if idx > 0:
        version = version[:idx]

    idx = version.find("_")
    if idx > 0 and "@" in version[idx + 1 :]:
        version = version[:idx]

    return version


def parse_package_key(key: str) -> tuple[str, str] | None:
    """Split a ``packages`` key into (name, version).

    Handles ``/pkg@1.0.0``, ``/pkg/1.0.0``, ``/@scope/pkg@1.0.0``,
    ``/@scope/pkg/1.0.0`` and the slash-less ``pkg@1.0.0`` used by
    lockfileVersion 9.
    """
    ref = key.removeprefix("/")

    scope = ""
    if ref.startswith("@"):
        slash = ref.find("/")
        if slash <= 1:
            return None
        scope, ref = ref[: slash + 1], ref[slash + 1 :]

    match = _NAME_VERSION.match(ref)
    if match is None:
        return None

    name = scope + match.group("name")
    version = strip_peer_suffix(match.group("version"))
    if not version:
        return None
    return name, version


def parse(content: str, include_dev: bool = True) -> list[PackageRecord]:
    """Return list of package records from a pnpm lock file."""
    # Scalar constructors such as timestamps raise plain ValueError/TypeError.
    try:
        data = yaml.safe_load(content)
    except (yaml.YAMLError, ValueError, TypeError, RecursionError) as exc:
        raise StructuralParseError(f"failed to parse pnpm-lock.yaml: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, dict):
        raise StructuralParseError(
            f"failed to parse pnpm-lock.yaml: expected a mapping, got {type(data).__name__}"
        )

    packages = data.get("packages")
    if not isinstance(packages, dict):
        return []

    seen: set[str] = set()
    records: list[PackageRecord] = []
    for key, raw in packages.items():
        if not isinstance(key, str) or not key:
            continue

        entry = PnpmPackage.from_mapping(raw)
        if entry is None:
            continue
        if entry.dev and not include_dev:
            continue

        parsed = parse_package_key(key)
        if parsed is None:
            continue

        record = PackageRecord.build(parsed[0], parsed[1], is_dev=entry.dev)
        if record is None or record.key in seen:
            continue
        seen.add(record.key)
        records.append(record)

    return records
