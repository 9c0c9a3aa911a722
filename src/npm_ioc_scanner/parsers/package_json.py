"""Parse package.json and extract dependencies across sections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models import Origin, PackageRecord
from .base import load_json_object, string_mapping
from .errors import StructuralParseError

# (section, is_dev) in emission order
SECTIONS = (
    ("dependencies", False),
    ("devDependencies", True),
    ("optionalDependencies", False),
    ("peerDependencies", False),
)

_RANGE_OPERATORS = ("^", "~", ">=", ">", "<=", "<", "=")


@dataclass(frozen=True)
class ManifestDocument:
    """Typed view of the package.json fields the scanner reads."""

    name: str = ""
    version: str = ""
    sections: dict[str, dict[str, str]] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ManifestDocument:
        name = data.get("name")
        version = data.get("version")
        return cls(
            name=name if isinstance(name, str) else "",
            version=version if isinstance(version, str) else "",
            sections={section: string_mapping(data.get(section), section) for section, _ in SECTIONS},
            scripts=string_mapping(data.get("scripts"), "scripts"),
        )


def clean_version(version: str) -> str:
    """Reduce a declared range to a single comparable version.

    ``^1.2.3`` -> ``1.2.3``; ``1.0.0 - 2.0.0`` -> ``1.0.0``.
    """
    for operator in _RANGE_OPERATORS:
        version = version.removeprefix(operator)
    version = version.strip()

    idx = version.find(" ")
    if idx > 0:
        version = version[:idx]
    return version


def load(content: str) -> ManifestDocument:
    return ManifestDocument.from_mapping(load_json_object(content, "package.json"))


def parse(content: str, include_dev: bool = True) -> list[PackageRecord]:
    """Return direct dependency records from every section.

    devDependencies are only included when ``include_dev`` is set.
    """
    document = load(content)

    records: list[PackageRecord] = []
    for section, is_dev in SECTIONS:
        if is_dev and not include_dev:
            continue
        for name, declared in document.sections[section].items():
            record = PackageRecord.build(
                name, clean_version(declared), is_dev=is_dev, origin=Origin.DIRECT
            )
            if record is not None:
                records.append(record)

    return records


def extract_scripts(content: str) -> dict[str, str]:
    """Return the ``scripts`` mapping, or an empty mapping for unreadable JSON."""
    try:
        return load(content).scripts
    except StructuralParseError:
        return {}
