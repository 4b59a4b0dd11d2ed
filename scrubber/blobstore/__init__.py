from scrubber.blobstore.base import BaseBlobStore, BlobObject
from scrubber.blobstore.factory import BlobStoreFactory

__all__ = ["BaseBlobStore", "BlobObject", "BlobStoreFactory"]
