"""
Object storage client for S3-compatible buckets (Cloudflare R2 in production).

Only a single PUT is needed: no listing, no multipart, no retries beyond
botocore's defaults.
"""

import logging
from typing import BinaryIO, Optional, Union

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from r2vault.config import StorageCredentials
from r2vault.errors import ConfigurationError, UploadError

logger = logging.getLogger(__name__)

Body = Union[bytes, BinaryIO]


class ObjectStorage:
    """
    Thin wrapper around a boto3 S3 client bound to one bucket.

    Usage:
        storage = ObjectStorage.from_credentials(config.storage)
        etag = storage.put_object("beluga/file.tar.gz", data, "application/gzip")
    """

    def __init__(self, client, bucket: str):
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_credentials(cls, credentials: StorageCredentials) -> "ObjectStorage":
        """Build a client for the configured endpoint. All four values are required."""
        missing = credentials.missing()
        if missing:
            raise ConfigurationError(
                f"Missing object storage settings: {', '.join(missing)}",
                missing=missing,
            )

        client = boto3.client(
            "s3",
            endpoint_url=credentials.endpoint,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            region_name="auto",
            config=BotoConfig(signature_version="s3v4"),
        )
        return cls(client, credentials.bucket)

    def put_object(self, key: str, body: Body, content_type: str) -> Optional[str]:
        """
        Upload ``body`` under ``key``.

        Args:
            key: Object key inside the bucket
            body: Raw bytes or a readable binary file object
            content_type: MIME type stored with the object

        Returns:
            The ETag reported by the provider

        Raises:
            UploadError: on any client or transport failure
        """
        try:
            response = self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise UploadError(
                f"Upload to {self.bucket}/{key} failed: {e}",
                bucket=self.bucket,
                key=key,
            ) from e

        etag = response.get("ETag")
        logger.debug(f"Uploaded s3://{self.bucket}/{key} (ETag {etag})")
        return etag
