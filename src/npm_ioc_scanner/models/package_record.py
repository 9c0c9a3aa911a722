"""Package record model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Origin(str, Enum):
    """Where a package record was declared."""

    DIRECT = "direct"
    TRANSITIVE = "transitive"


@dataclass(frozen=True)
class PackageRecord:
    """A resolved (name, version) pair extracted from a manifest or lockfile."""

    name: str
    version: str
    is_dev: bool = False
    origin: Origin = Origin.TRANSITIVE

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Package name must be non-empty")
        if not self.version:
            raise ValueError("Package version must be non-empty")

    @property
    def key(self) -> str:
        return f"{self.name}@{self.version}"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "version": self.version,
            "isDev": self.is_dev,
            "origin": self.origin.value,
        }

    @classmethod
    def build(
        cls,
        name: str,
        version: str,
        *,
        is_dev: bool = False,
        origin: Origin = Origin.TRANSITIVE,
    ) -> PackageRecord | None:
        """Return a record, or None when name or version is empty."""
        if not name or not version:
            return None
        return cls(name=name, version=version, is_dev=is_dev, origin=origin)
