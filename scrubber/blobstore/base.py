from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BlobObject:
    """Handle to one stored object. `name` is its full path in the store."""

    name: str


class BaseBlobStore(ABC):
    """Contract for all content-addressed blob storage adapters."""

    @abstractmethod
    def list_objects(self, prefix: str) -> list[BlobObject]:
        """List every object whose path starts with prefix.

        Raises:
            BlobStoreError: if the backend listing fails.
        """

    @abstractmethod
    def delete_object(self, handle: BlobObject) -> None:
        """Delete one object. Deleting an absent object is not an error.

        Raises:
            BlobDeleteError: if the backend refuses or fails the delete.
        """
