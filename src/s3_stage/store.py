"""S3 object store used by the put stage."""

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from s3_stage.config import StageConfig
from s3_stage.exceptions import UploadError
from s3_stage.models import ACL, Region


class ObjectStore:
    """Puts objects into a single S3 bucket."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: Region | str,
        bucket: str,
        endpoint_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize the store and its boto3 client.

        Args:
            access_key: AWS access key id.
            secret_key: AWS secret access key.
            region: Region the bucket lives in.
            bucket: Target bucket name.
            endpoint_url: Alternative endpoint for S3-compatible services.
            client: Pre-built S3 client; one is created when omitted.

        Raises:
            ValueError: If bucket is empty or whitespace.
        """
        if not bucket or not bucket.strip():
            raise ValueError("Bucket name must not be empty or whitespace")

        self.bucket = bucket
        self.region = Region(region).value
        if client is None:
            client_kwargs = {
                "region_name": self.region,
                "aws_access_key_id": access_key,
                "aws_secret_access_key": secret_key,
            }
            if endpoint_url:
                client_kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **client_kwargs)
        self._client = client

    @classmethod
    def from_config(cls, config: StageConfig) -> "ObjectStore":
        return cls(
            access_key=config.access_key,
            secret_key=config.secret_key,
            region=config.region,
            bucket=config.bucket,
            endpoint_url=config.endpoint_url,
        )

    def put(self, key: str, data: bytes, content_type: str, acl: ACL | str) -> None:
        """Upload one object in a single request.

        Raises:
            UploadError: If S3 returns an error or the request cannot be made.
        """
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ACL=ACL(acl).value,
            )
        except (ClientError, BotoCoreError) as e:
            raise UploadError(
                f"Failed to upload '{key}' to bucket '{self.bucket}': {e}",
                key=key,
                original_error=e,
            ) from e
