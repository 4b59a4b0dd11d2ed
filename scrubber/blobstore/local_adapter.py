from pathlib import Path

from scrubber.blobstore.base import BaseBlobStore, BlobObject
from scrubber.blobstore.exceptions import BlobDeleteError, BlobStoreError


class LocalBlobStore(BaseBlobStore):
    """Blob store over a directory tree. Object names are POSIX paths relative to root."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def list_objects(self, prefix: str) -> list[BlobObject]:
        if not self._root.is_dir():
            return []
        # Walk only the deepest directory the prefix fully names.
        head, _, _ = prefix.rpartition("/")
        start = self._root / head if head else self._root
        if not start.is_dir():
            return []
        try:
            names = sorted(
                path.relative_to(self._root).as_posix()
                for path in start.rglob("*")
                if path.is_file()
            )
        except OSError as exc:
            raise BlobStoreError(f"Failed to list {prefix} under {self._root}: {exc}") from exc
        return [BlobObject(name=name) for name in names if name.startswith(prefix)]

    def delete_object(self, handle: BlobObject) -> None:
        path = self._root / handle.name
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise BlobDeleteError(f"Failed to delete {path}: {exc}", path=handle.name) from exc
