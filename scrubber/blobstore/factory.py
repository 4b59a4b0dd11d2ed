from pathlib import Path

from scrubber.blobstore.base import BaseBlobStore
from scrubber.blobstore.local_adapter import LocalBlobStore
from scrubber.blobstore.s3_adapter import S3BlobStore
from scrubber.config.settings import Settings, require_run_config


class BlobStoreFactory:
    """Creates the configured blob store adapter."""

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        """Build the adapter named by settings.blob_backend.

        Raises:
            ConfigurationError: via require_run_config, before any client is built.
        """
        require_run_config(settings)
        if settings.blob_backend.lower() == "local":
            return LocalBlobStore(Path(settings.blob_local_root))
        return S3BlobStore(
            bucket=settings.blob_bucket,
            region=settings.blob_region,
            endpoint_url=settings.blob_endpoint_url,
            access_key_id=settings.blob_access_key_id,
            secret_access_key=settings.blob_secret_access_key,
        )
