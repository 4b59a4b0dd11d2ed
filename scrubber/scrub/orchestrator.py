import itertools
import threading
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor, wait

from scrubber.blobstore.base import BaseBlobStore, BlobObject
from scrubber.blobstore.exceptions import BlobDeleteError, BlobStoreError
from scrubber.config.settings import Settings
from scrubber.database.models import SourceDescriptor, VersionRecord
from scrubber.database.repositories.source_repository import SourceRepository
from scrubber.database.repositories.version_repository import VersionRepository
from scrubber.logging.logger import Log
from scrubber.reporting.base import BaseRunReporter
from scrubber.scrub.dedup import DedupGuard
from scrubber.scrub.exceptions import SourceNotFoundError, UnitPartiallyScrubbedError
from scrubber.scrub.models import ScrubSummary, ScrubUnit, UnitOutcome, UnitResult
from scrubber.scrub.paths import resolve_prefix


def batched(items: Iterable[VersionRecord], size: int) -> Iterator[list[VersionRecord]]:
    """Cut an iterable into lists of at most size items without materializing it."""
    iterator = iter(items)
    while batch := list(itertools.islice(iterator, size)):
        yield batch


class ScrubOrchestrator:
    """Garbage-collects blobs and metadata rows of deleted document versions.

    Run: fetch deleted versions -> cut batches -> scrub each batch
    concurrently -> report. Batches run one after another; the next batch
    starts only once every unit of the current one has finished.
    """

    def __init__(
        self,
        version_repo: VersionRepository,
        source_repo: SourceRepository,
        blob_store: BaseBlobStore,
        reporter: BaseRunReporter,
        batch_size: int = 32,
        liveness_mode: str = "not_before",
        dry_run: bool = False,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._version_repo = version_repo
        self._source_repo = source_repo
        self._blob_store = blob_store
        self._reporter = reporter
        self._batch_size = batch_size
        self._liveness_mode = liveness_mode
        self._dry_run = dry_run
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Stop the run before the next batch. In-flight units still finish."""
        self._cancel_event.set()

    def run(self) -> ScrubSummary:
        """Scrub every deleted version once and report the totals."""
        guard = DedupGuard()
        summary = ScrubSummary(dry_run=self._dry_run)
        candidates = iter(self._version_repo.iter_deleted_versions())
        Log.info("Fetching deleted core document versions to scrub", dry_run=self._dry_run)

        try:
            with ThreadPoolExecutor(
                max_workers=self._batch_size, thread_name_prefix="scrub"
            ) as executor:
                for index, batch in enumerate(batched(candidates, self._batch_size)):
                    if self._cancel_event.is_set():
                        summary.cancelled = True
                        Log.warning("Scrub run cancelled", batch_index=index)
                        break
                    Log.info("Processing batch", batch_index=index, batch_size=len(batch))
                    self._run_batch(executor, batch, guard, summary)
        finally:
            close = getattr(candidates, "close", None)
            if close is not None:
                close()

        if self._cancel_event.is_set():
            summary.cancelled = True

        Log.info(
            "Done scrubbing deleted core document versions",
            units_encountered=summary.units_encountered,
            units_scrubbed=summary.units_scrubbed,
            units_skipped_duplicate=summary.units_skipped_duplicate,
            units_skipped_live=summary.units_skipped_live,
            units_failed=summary.units_failed,
            objects_deleted=summary.objects_deleted,
        )
        if not summary.cancelled:
            self._reporter.report_success(summary.to_report())
        return summary

    def _run_batch(
        self,
        executor: ThreadPoolExecutor,
        batch: list[VersionRecord],
        guard: DedupGuard,
        summary: ScrubSummary,
    ) -> None:
        futures: list[Future[UnitResult]] = [
            executor.submit(self.scrub_unit, ScrubUnit.from_version(version), guard)
            for version in batch
        ]
        try:
            wait(futures)
        except KeyboardInterrupt:
            Log.warning("Interrupted, letting in-flight units finish")
            self.cancel()
            wait(futures)
        for future in futures:
            summary.record(future.result())
        summary.batches_processed += 1

    def scrub_unit(self, unit: ScrubUnit, guard: DedupGuard) -> UnitResult:
        """Scrub one unit. Never raises; failures are logged and returned as outcomes."""
        context = {
            "source_id": unit.source_id,
            "document_id": unit.document_id,
            "content_hash": unit.content_hash,
        }
        key = guard.unit_key(unit.source_id, unit.document_id, unit.content_hash)
        if not guard.claim(key):
            Log.debug("Skipping already processed unit", **context)
            return UnitResult(UnitOutcome.SKIPPED_DUPLICATE)

        try:
            result = self._scrub_claimed_unit(unit, guard)
        except SourceNotFoundError as exc:
            Log.error(f"Integrity error while scrubbing: {exc}", **context)
            result = UnitResult(UnitOutcome.FAILED_INTEGRITY)
        except UnitPartiallyScrubbedError as exc:
            Log.warning(f"{exc}, metadata kept for next run", **context)
            result = UnitResult(UnitOutcome.FAILED_TRANSIENT, exc.deleted_count)
        except BlobStoreError as exc:
            Log.warning(f"Blob store error, metadata kept for next run: {exc}", **context)
            result = UnitResult(UnitOutcome.FAILED_TRANSIENT)
        except Exception as exc:
            Log.error(f"Unexpected error while scrubbing: {exc}", **context)
            result = UnitResult(UnitOutcome.FAILED_UNEXPECTED)

        # Only a scrubbed unit stays claimed; anything else may be retried.
        if result.outcome != UnitOutcome.SCRUBBED:
            guard.release(key)
        return result

    def _scrub_claimed_unit(self, unit: ScrubUnit, guard: DedupGuard) -> UnitResult:
        not_before = unit.deleted_at if self._liveness_mode == "not_before" else None
        if self._version_repo.has_live_version_with_hash(
            unit.source_id, unit.document_id, unit.content_hash, not_before
        ):
            Log.debug(
                "Skipping as there is a more recent version with the same hash",
                source_id=unit.source_id,
                document_id=unit.document_id,
                content_hash=unit.content_hash,
            )
            return UnitResult(UnitOutcome.SKIPPED_LIVE)

        source = self._source_repo.get_source(unit.source_id)
        prefix = resolve_prefix(
            source.project_id, source.internal_id, unit.document_id, unit.content_hash
        )
        objects = self._blob_store.list_objects(f"{prefix}/")

        if self._dry_run:
            Log.info(
                "Would scrub deleted versions",
                document_id=unit.document_id,
                content_hash=unit.content_hash,
                source_id=source.id,
                files_count=len(objects),
            )
            return UnitResult(UnitOutcome.SCRUBBED)

        deleted = self._delete_objects(objects, unit, source, guard)
        self._version_repo.purge_deleted_versions(
            unit.source_id, unit.document_id, unit.content_hash
        )
        Log.info(
            "Scrubbed deleted versions",
            document_id=unit.document_id,
            content_hash=unit.content_hash,
            project=source.project_id,
            internal_id=source.internal_id,
            source_id=source.id,
            files_count=len(objects),
        )
        return UnitResult(UnitOutcome.SCRUBBED, deleted)

    def _delete_objects(
        self,
        objects: list[BlobObject],
        unit: ScrubUnit,
        source: SourceDescriptor,
        guard: DedupGuard,
    ) -> int:
        """Delete every listed object not yet deleted in this run.

        Raises:
            UnitPartiallyScrubbedError: if at least one delete failed.
        """
        deleted = 0
        failed: list[str] = []
        for handle in objects:
            path_key = guard.path_key(handle.name)
            if not guard.claim(path_key):
                continue
            Log.info(
                "Scrubbing",
                path=handle.name,
                document_id=unit.document_id,
                content_hash=unit.content_hash,
                project=source.project_id,
                internal_id=source.internal_id,
                source_id=source.id,
            )
            try:
                self._blob_store.delete_object(handle)
            except BlobDeleteError as exc:
                guard.release(path_key)
                Log.warning(f"Failed to delete object: {exc}", path=exc.path)
                failed.append(exc.path)
                continue
            deleted += 1

        if failed:
            raise UnitPartiallyScrubbedError(
                f"{len(failed)} of {len(objects)} objects could not be deleted",
                failed_paths=failed,
                deleted_count=deleted,
            )
        return deleted


def build_orchestrator(
    settings: Settings,
    blob_store: BaseBlobStore,
    reporter: BaseRunReporter,
) -> ScrubOrchestrator:
    """Build a ScrubOrchestrator from settings with the database repositories."""
    return ScrubOrchestrator(
        version_repo=VersionRepository(),
        source_repo=SourceRepository(),
        blob_store=blob_store,
        reporter=reporter,
        batch_size=settings.scrub_batch_size,
        liveness_mode=settings.scrub_liveness_mode.lower(),
        dry_run=settings.scrub_dry_run,
    )
