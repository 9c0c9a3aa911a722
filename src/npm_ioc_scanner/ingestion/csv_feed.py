"""IOC CSV feed ingestion.

Two header dialects are understood (case-insensitive):

* DataDog: ``package_name,package_versions,...`` with comma-separated versions
  such as ``"6.10.1, 6.8.2"``.
* Wiz: ``Package,Version`` with npm exact-match specs such as
  ``= 1.0.0 || = 2.0.0``.

Unrecognised headers fall back to column 0 = name, column 1 = version and
report a :class:`HeaderAmbiguity` through the warning sink.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

import requests
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

from ..models import SourceSnapshot, VulnDatabase, VulnEntry

logger = logging.getLogger(__name__)

DATADOG_IOC_URL = (
    "https://raw.githubusercontent.com/DataDog/indicators-of-compromise/"
    "refs/heads/main/shai-hulud-2.0/consolidated_iocs.csv"
)
WIZ_IOC_URL = (
    "https://raw.githubusercontent.com/wiz-sec-public/"
    "wiz-research-iocs/main/reports/shai-hulud-2-packages.csv"
)
DEFAULT_IOC_URLS = (DATADOG_IOC_URL, WIZ_IOC_URL)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0 Safari/537.36"
)

NAME_COLUMNS = frozenset({"package_name", "packagename", "name", "package"})
VERSION_COLUMNS = frozenset(
    {"package_versions", "package_version", "packageversion", "version", "versions"}
)
SAMPLE_ROWS = 3


class FeedError(RuntimeError):
    """Base error for failures while fetching or parsing a feed."""


class SourceUnavailable(FeedError):
    """Raised when an IOC source (or every IOC source) could not be loaded."""

    def __init__(self, message: str, errors: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.errors = list(errors)


class FeedFetchError(SourceUnavailable):
    """Raised when a feed cannot be fetched or read."""


class FeedParseError(SourceUnavailable):
    """Raised when a feed cannot be parsed into entries."""


@dataclass(frozen=True)
class HeaderAmbiguity:
    """Non-fatal: the header did not name the name/version columns."""

    header: tuple[str, ...]
    name_column: int
    version_column: int
    samples: tuple[str, ...]

    @property
    def message(self) -> str:
        lines = [
            f"CSV headers not recognized (found: {list(self.header)}). "
            f"Assuming column {self.name_column + 1} = package name, "
            f"column {self.version_column + 1} = version. Sample data:"
        ]
        lines.extend(f"  {sample}" for sample in self.samples)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.message


WarningSink = Callable[[HeaderAmbiguity], None]


def _log_warning(warning: HeaderAmbiguity) -> None:
    logger.warning("%s", warning.message)


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> Response:
    return requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=30)


def fetch_csv(url: str) -> bytes:
    """Return the raw CSV payload at ``url``."""

    try:
        response = _http_get(url)
    except requests.RequestException as exc:  # pragma: no cover - network failure path
        raise FeedFetchError(f"failed to fetch IOC feed: {exc}") from exc

    if response.status_code != 200:
        raise FeedFetchError(f"failed to fetch IOC feed: HTTP {response.status_code}")

    return response.content


def detect_columns(header: Sequence[str]) -> tuple[int | None, int | None]:
    """Return the (name, version) column indices named by ``header``, if any.

    When a header names the same role twice, the first matching column wins.
    """
    name_idx: int | None = None
    version_idx: int | None = None
    for index, column in enumerate(header):
        label = column.strip().lower()
        if name_idx is None and label in NAME_COLUMNS:
            name_idx = index
        if version_idx is None and label in VERSION_COLUMNS:
            version_idx = index
    return name_idx, version_idx


def _is_npm_spec(field: str) -> bool:
    return "||" in field or field.startswith("=") or "= " in field


def _split_npm_spec(field: str) -> list[str]:
    versions: list[str] = []
    for part in field.split("||"):
        cleaned = part.strip().removeprefix("=").strip()
        if cleaned:
            versions.append(cleaned)
    return versions


def expand_versions(field: str) -> list[str]:
    """Expand a version cell into concrete versions.

    ``= 1.0.0 || = 2.0.0`` -> ``["1.0.0", "2.0.0"]``
    ``6.10.1, 6.8.2`` -> ``["6.10.1", "6.8.2"]``
    A cell that expands to nothing is kept as a single raw version.
    """
    if _is_npm_spec(field):
        versions = _split_npm_spec(field)
    else:
        versions = [part.strip() for part in field.split(",") if part.strip()]

    if not versions and field:
        versions = [field]
    return versions


def _iter_records(reader: Iterator[list[str]]) -> Iterable[list[str]]:
    while True:
        try:
            yield next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            logger.debug("Skipping malformed CSV line: %s", exc)


def _cell(record: Sequence[str], index: int) -> str:
    return record[index].strip() if index < len(record) else ""


def parse_csv(
    payload: bytes | str,
    on_warning: WarningSink | None = None,
    location: str = "<memory>",
) -> VulnDatabase:
    """Build a database from one CSV payload.

    Raises:
        FeedParseError: the payload has no header or fewer than two columns.
    """
    raw = payload.encode("utf-8") if isinstance(payload, str) else payload
    text = raw.decode("utf-8-sig", errors="replace")
    sink = on_warning or _log_warning

    reader = csv.reader(io.StringIO(text))
    # Blank lines come back as empty records and are not rows at all.
    records = (record for record in _iter_records(reader) if record)
    try:
        header = next(record for record in records if any(cell.strip() for cell in record))
    except StopIteration:
        raise FeedParseError("failed to read CSV header: payload is empty") from None

    if len(header) < 2:
        raise FeedParseError("CSV must have at least 2 columns (package name and version)")

    rows = list(records)

    name_idx, version_idx = detect_columns(header)
    if name_idx is None or version_idx is None:
        name_idx = 0 if name_idx is None else name_idx
        version_idx = 1 if version_idx is None else version_idx
        samples = tuple(
            f"{_cell(row, name_idx)} @ {_cell(row, version_idx)}" for row in rows[:SAMPLE_ROWS]
        )
        sink(
            HeaderAmbiguity(
                header=tuple(header),
                name_column=name_idx,
                version_column=version_idx,
                samples=samples,
            )
        )

    db = VulnDatabase()
    skipped = 0
    for row in rows:
        name = _cell(row, name_idx)
        version_field = _cell(row, version_idx)
        # Both are required for an exact match later on.
        if not name or not version_field:
            skipped += 1
            continue

        for version in expand_versions(version_field):
            db.add(
                VulnEntry(
                    package_name=name,
                    package_version=version,
                    original_spec=version_field,
                )
            )

    if skipped:
        logger.debug("Skipped %d row(s) without name or version in %s", skipped, location)

    db.sources.append(
        SourceSnapshot.from_content(location=location, content=raw, total_records=len(rows))
    )
    return db


def load_from_file(path: Path | str, on_warning: WarningSink | None = None) -> VulnDatabase:
    try:
        payload = Path(path).read_bytes()
    except OSError as exc:
        raise FeedFetchError(f"failed to open IOC file: {exc}") from exc
    return parse_csv(payload, on_warning, location=str(path))


def load_from_url(url: str, on_warning: WarningSink | None = None) -> VulnDatabase:
    return parse_csv(fetch_csv(url), on_warning, location=url)


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def load_source(source: str, on_warning: WarningSink | None = None) -> VulnDatabase:
    """Load a single source, choosing URL or filesystem by its prefix."""
    if is_url(source):
        return load_from_url(source, on_warning)
    return load_from_file(source, on_warning)


def load_from_sources(
    sources: Iterable[str], on_warning: WarningSink | None = None
) -> VulnDatabase:
    """Load and merge several sources; fail only when every source fails.

    Raises:
        SourceUnavailable: no sources were given, or all of them failed. The
            per-source messages are joined into the error and kept on
            ``errors``.
    """
    sources = list(sources)
    if not sources:
        raise SourceUnavailable("no IOC sources provided")

    db = VulnDatabase()
    errors: list[str] = []
    loaded = 0

    for source in sources:
        try:
            source_db = load_source(source, on_warning)
        except FeedError as exc:
            logger.warning("IOC source %s unavailable: %s", source, exc)
            errors.append(f"{source}: {exc}")
            continue
        db.merge(source_db)
        loaded += 1
        logger.debug("Loaded %d IOC entries from %s", source_db.total_entries, source)

    if loaded == 0:
        raise SourceUnavailable(
            f"failed to load any IOC sources: {'; '.join(errors)}", errors=errors
        )

    return db
