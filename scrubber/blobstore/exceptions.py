class BlobStoreError(Exception):
    """Raised when the blob store backend fails to list or delete."""


class BlobDeleteError(BlobStoreError):
    """Raised when a single object could not be deleted."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path
