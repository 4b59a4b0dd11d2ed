import threading
import time
from collections.abc import Iterator
from pathlib import Path

import pytest

from scrubber.blobstore.base import BaseBlobStore, BlobObject
from scrubber.blobstore.exceptions import BlobDeleteError
from scrubber.blobstore.local_adapter import LocalBlobStore
from scrubber.database.models import STATUS_DELETED, SourceDescriptor, VersionRecord
from scrubber.reporting.base import BaseRunReporter
from scrubber.scrub.exceptions import SourceNotFoundError


class InMemoryMetadata:
    """Stands in for both VersionRepository and SourceRepository."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.versions: list[VersionRecord] = []
        self.sources: dict[int, SourceDescriptor] = {}
        self.purge_calls: list[tuple[int, str, str]] = []
        self.live_checks: list[tuple[int, str, str, int | None]] = []

    def add_source(self, source_id: int, project_id: int, internal_id: str) -> SourceDescriptor:
        source = SourceDescriptor(id=source_id, project_id=project_id, internal_id=internal_id)
        self.sources[source_id] = source
        return source

    def add_version(
        self,
        version_id: int,
        source_id: int,
        document_id: str,
        created_at: int,
        content_hash: str,
        status: str,
    ) -> VersionRecord:
        version = VersionRecord(
            id=version_id,
            source_id=source_id,
            document_id=document_id,
            created_at=created_at,
            content_hash=content_hash,
            status=status,
        )
        self.versions.append(version)
        return version

    def version_ids(self) -> set[int]:
        return {v.id for v in self.versions}

    def iter_deleted_versions(self, fetch_size: int = 1000) -> Iterator[VersionRecord]:
        snapshot = [v for v in self.versions if v.status == STATUS_DELETED]
        return iter(snapshot)

    def has_live_version_with_hash(
        self, source_id: int, document_id: str, content_hash: str, not_before: int | None
    ) -> bool:
        with self._lock:
            self.live_checks.append((source_id, document_id, content_hash, not_before))
            return any(
                v.source_id == source_id
                and v.document_id == document_id
                and v.content_hash == content_hash
                and v.status != STATUS_DELETED
                and (not_before is None or v.created_at >= not_before)
                for v in self.versions
            )

    def get_source(self, source_id: int) -> SourceDescriptor:
        source = self.sources.get(source_id)
        if source is None:
            raise SourceNotFoundError(f"Could not find data source {source_id}")
        return source

    def purge_deleted_versions(self, source_id: int, document_id: str, content_hash: str) -> int:
        with self._lock:
            self.purge_calls.append((source_id, document_id, content_hash))
            kept = [
                v
                for v in self.versions
                if not (
                    v.source_id == source_id
                    and v.document_id == document_id
                    and v.content_hash == content_hash
                    and v.status == STATUS_DELETED
                )
            ]
            removed = len(self.versions) - len(kept)
            self.versions = kept
            return removed


class RecordingBlobStore(BaseBlobStore):
    """Wraps a real blob store, records calls and injects delete failures."""

    def __init__(self, inner: BaseBlobStore, list_delay: float = 0.0) -> None:
        self._inner = inner
        self._lock = threading.Lock()
        self._list_delay = list_delay
        self._in_flight = 0
        self.peak_in_flight = 0
        self.list_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.failing_paths: set[str] = set()

    def list_objects(self, prefix: str) -> list[BlobObject]:
        with self._lock:
            self.list_calls.append(prefix)
            self._in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self._in_flight)
        try:
            if self._list_delay:
                time.sleep(self._list_delay)
            return self._inner.list_objects(prefix)
        finally:
            with self._lock:
                self._in_flight -= 1

    def delete_object(self, handle: BlobObject) -> None:
        with self._lock:
            self.delete_calls.append(handle.name)
        if handle.name in self.failing_paths:
            raise BlobDeleteError(f"Failed to delete {handle.name}: 503", path=handle.name)
        self._inner.delete_object(handle)


class RecordingReporter(BaseRunReporter):
    def __init__(self) -> None:
        self.reports: list[dict[str, object]] = []

    def report_success(self, summary: dict[str, object]) -> None:
        self.reports.append(summary)


def write_blobs(root: Path, prefix: str, *filenames: str) -> list[str]:
    """Create files under root/prefix and return their object names."""
    names = []
    for filename in filenames:
        path = root / prefix / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"content")
        names.append(f"{prefix}/{filename}")
    return names


def remaining_blobs(root: Path, prefix: str) -> list[str]:
    base = root / prefix
    if not base.exists():
        return []
    return sorted(p.relative_to(root).as_posix() for p in base.rglob("*") if p.is_file())


@pytest.fixture()
def metadata() -> InMemoryMetadata:
    return InMemoryMetadata()


@pytest.fixture()
def blob_root(tmp_path: Path) -> Path:
    root = tmp_path / "blobs"
    root.mkdir()
    return root


@pytest.fixture()
def blob_store(blob_root: Path) -> RecordingBlobStore:
    return RecordingBlobStore(LocalBlobStore(blob_root))


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def make_blob_store(blob_root: Path):
    def _make(list_delay: float = 0.0) -> RecordingBlobStore:
        return RecordingBlobStore(LocalBlobStore(blob_root), list_delay=list_delay)

    return _make


@pytest.fixture()
def put_blobs(blob_root: Path):
    def _put(prefix: str, *filenames: str) -> list[str]:
        return write_blobs(blob_root, prefix, *filenames)

    return _put


@pytest.fixture()
def blobs_under(blob_root: Path):
    def _list(prefix: str) -> list[str]:
        return remaining_blobs(blob_root, prefix)

    return _list
