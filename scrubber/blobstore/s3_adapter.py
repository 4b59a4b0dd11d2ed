from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from scrubber.blobstore.base import BaseBlobStore, BlobObject
from scrubber.blobstore.exceptions import BlobDeleteError, BlobStoreError


class S3BlobStore(BaseBlobStore):
    """Blob store backed by an S3 (or S3-compatible) bucket."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {}
        if region:
            client_kwargs["region_name"] = region
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url
        if access_key_id:
            client_kwargs["aws_access_key_id"] = access_key_id
        if secret_access_key:
            client_kwargs["aws_secret_access_key"] = secret_access_key

        self._bucket = bucket
        self._client = boto3.client("s3", **client_kwargs)

    def list_objects(self, prefix: str) -> list[BlobObject]:
        paginator = self._client.get_paginator("list_objects_v2")
        objects: list[BlobObject] = []
        try:
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    objects.append(BlobObject(name=obj["Key"]))
        except (BotoCoreError, ClientError) as exc:
            raise BlobStoreError(
                f"Failed to list s3://{self._bucket}/{prefix}: {exc}"
            ) from exc
        return objects

    def delete_object(self, handle: BlobObject) -> None:
        # DeleteObject succeeds for keys that are already gone.
        try:
            self._client.delete_object(Bucket=self._bucket, Key=handle.name)
        except (BotoCoreError, ClientError) as exc:
            raise BlobDeleteError(
                f"Failed to delete s3://{self._bucket}/{handle.name}: {exc}",
                path=handle.name,
            ) from exc
