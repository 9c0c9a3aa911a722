"""Manifest and lockfile parsers.

Every parser has the signature ``parse(content, include_dev=True)`` and returns
an ordered list of :class:`~npm_ioc_scanner.models.PackageRecord`.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import PurePath

from ..models import PackageRecord
from . import package_json, package_lock, pnpm_lock, yarn_lock
from .classifier import FileFormat, NpmLockfileGeneration, classify, is_supported_name, is_yarn_berry
from .errors import ParseError, StructuralParseError, UnsupportedFormatError

ParseFunction = Callable[[str, bool], list[PackageRecord]]

PARSERS: dict[FileFormat, ParseFunction] = {
    FileFormat.MANIFEST: package_json.parse,
    FileFormat.NPM_LOCKFILE: package_lock.parse,
    FileFormat.PNPM_LOCKFILE: pnpm_lock.parse,
    FileFormat.YARN_CLASSIC_LOCKFILE: yarn_lock.parse,
}


def parse_content(
    content: str, file_format: FileFormat, include_dev: bool = True
) -> list[PackageRecord]:
    """Parse ``content`` already classified as ``file_format``.

    Raises:
        StructuralParseError: the document is not valid JSON/YAML.
        UnsupportedFormatError: the format is recognised but not supported.
    """
    parser = PARSERS.get(file_format)
    if parser is None:
        if file_format is FileFormat.YARN_BERRY_LOCKFILE:
            raise UnsupportedFormatError(
                "yarn.lock appears to be Yarn Berry (v2+) format, which is not supported"
            )
        raise UnsupportedFormatError(f"no parser for format '{file_format.value}'")
    return parser(content, include_dev)


def parse_file(path: str | PurePath, content: str, include_dev: bool = True) -> list[PackageRecord]:
    """Classify a file by name and content, then parse it."""
    file_format = classify(path, content)
    if file_format is FileFormat.UNKNOWN:
        raise UnsupportedFormatError(f"unrecognised dependency file: {path}")
    return parse_content(content, file_format, include_dev)


__all__ = [
    "FileFormat",
    "NpmLockfileGeneration",
    "PARSERS",
    "ParseError",
    "StructuralParseError",
    "UnsupportedFormatError",
    "classify",
    "is_supported_name",
    "is_yarn_berry",
    "parse_content",
    "parse_file",
]
