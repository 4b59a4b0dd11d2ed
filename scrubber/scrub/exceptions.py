class ScrubberError(Exception):
    """Base exception for all scrubber-related errors."""


class ConfigurationError(ScrubberError):
    """Raised when a required endpoint or credential is missing. Aborts the run."""


class SourceNotFoundError(ScrubberError):
    """Raised when a version references a data source row that does not exist."""


class UnitPartiallyScrubbedError(ScrubberError):
    """Raised when some object deletes of a unit failed; its metadata is kept."""

    def __init__(self, message: str, failed_paths: list[str], deleted_count: int = 0) -> None:
        super().__init__(message)
        self.failed_paths = failed_paths
        self.deleted_count = deleted_count
