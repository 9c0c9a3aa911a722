"""Source snapshot model for loaded indicator feeds."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from hashlib import sha256


@dataclass(frozen=True)
class SourceSnapshot:
    """Capture the origin metadata for one loaded IOC source."""

    retrieved_at: datetime
    location: str
    content_hash: str
    total_records: int

    def __post_init__(self) -> None:
        if self.retrieved_at.tzinfo is None:
            raise ValueError("retrieved_at must be timezone-aware")
        if not self.location:
            raise ValueError("location must be provided")
        if not self.content_hash or len(self.content_hash) != 64:
            raise ValueError("content_hash must be a SHA-256 hex digest")
        if self.total_records < 0:
            raise ValueError("total_records must be non-negative")

    def to_dict(self) -> dict[str, object]:
        return {
            "retrievedAt": self.retrieved_at.isoformat().replace("+00:00", "Z"),
            "location": self.location,
            "contentHash": self.content_hash,
            "totalRecords": self.total_records,
        }

    @classmethod
    def from_content(
        cls,
        *,
        location: str,
        content: bytes,
        total_records: int,
        retrieved_at: datetime | None = None,
    ) -> SourceSnapshot:
        timestamp = retrieved_at or datetime.now(timezone.utc)
        digest = sha256(content).hexdigest()
        return cls(
            retrieved_at=timestamp,
            location=location,
            content_hash=digest,
            total_records=total_records,
        )
