from scrubber.logging.logger import Log
from scrubber.reporting.base import BaseRunReporter


class LogRunReporter(BaseRunReporter):
    """Reports run results to the scrubber log."""

    def __init__(self, check_name: str = "scrub_deleted_core_document_versions") -> None:
        self._check_name = check_name

    def report_success(self, summary: dict[str, object]) -> None:
        Log.info(f"Check {self._check_name} succeeded", **summary)
