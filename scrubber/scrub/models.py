from dataclasses import asdict, dataclass
from enum import Enum

from scrubber.database.models import VersionRecord


class UnitOutcome(str, Enum):
    SCRUBBED = "scrubbed"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_LIVE = "skipped_live"
    FAILED_INTEGRITY = "failed_integrity"
    FAILED_TRANSIENT = "failed_transient"
    FAILED_UNEXPECTED = "failed_unexpected"


@dataclass(frozen=True)
class ScrubUnit:
    """One reconciliation decision: a (source, document, hash) triple."""

    source_id: int
    document_id: str
    content_hash: str
    deleted_at: int

    @classmethod
    def from_version(cls, version: VersionRecord) -> "ScrubUnit":
        return cls(
            source_id=version.source_id,
            document_id=version.document_id,
            content_hash=version.content_hash,
            deleted_at=version.created_at,
        )


@dataclass(frozen=True)
class UnitResult:
    outcome: UnitOutcome
    objects_deleted: int = 0


@dataclass
class ScrubSummary:
    """Counters for one orchestrator run."""

    units_encountered: int = 0
    units_scrubbed: int = 0
    units_skipped_duplicate: int = 0
    units_skipped_live: int = 0
    units_failed_integrity: int = 0
    units_failed_transient: int = 0
    units_failed_unexpected: int = 0
    objects_deleted: int = 0
    batches_processed: int = 0
    cancelled: bool = False
    dry_run: bool = False

    @property
    def units_failed(self) -> int:
        return (
            self.units_failed_integrity
            + self.units_failed_transient
            + self.units_failed_unexpected
        )

    def record(self, result: UnitResult) -> None:
        self.units_encountered += 1
        self.objects_deleted += result.objects_deleted
        counter = f"units_{result.outcome.value}"
        setattr(self, counter, getattr(self, counter) + 1)

    def to_report(self) -> dict[str, object]:
        """Payload for the run reporter. `unitsScrubbed` is the stable key."""
        payload: dict[str, object] = {"unitsScrubbed": self.units_scrubbed}
        payload.update(asdict(self))
        payload["units_failed"] = self.units_failed
        return payload
