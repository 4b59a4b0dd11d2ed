from abc import ABC, abstractmethod


class BaseRunReporter(ABC):
    """Receives the summary of a completed scrub run."""

    @abstractmethod
    def report_success(self, summary: dict[str, object]) -> None:
        """Publish a successful run summary. Must contain `unitsScrubbed`."""
