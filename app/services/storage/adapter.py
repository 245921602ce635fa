import logging
from abc import ABC, abstractmethod

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


class StorageAdapter(ABC):
    provider: str = "s3"
    bucket: str | None = None

    @abstractmethod
    def put_object(self, object_key: str, content: bytes, content_type: str) -> None:
        pass

    @abstractmethod
    def delete_object(self, object_key: str) -> None:
        pass

    @abstractmethod
    def generate_download_url(self, object_key: str, expires_in: int = 3600) -> str:
        """Return a presigned GET URL valid for ``expires_in`` seconds."""

    @abstractmethod
    def object_exists(self, object_key: str) -> bool:
        pass


class S3StorageAdapter(StorageAdapter):
    def __init__(
        self,
        bucket: str,
        *,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client=None,
    ):
        self.provider = "s3"
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    def put_object(self, object_key: str, content: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamUnavailable(f"failed to upload to S3: {exc}") from exc

    def delete_object(self, object_key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=object_key)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamUnavailable(f"failed to delete from S3: {exc}") from exc

    def generate_download_url(self, object_key: str, expires_in: int = 3600) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": object_key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamUnavailable(f"failed to generate presigned URL: {exc}") from exc

    def object_exists(self, object_key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=object_key)
            return True
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in _MISSING_OBJECT_CODES:
                return False
            raise UpstreamUnavailable(f"failed to inspect S3 object: {exc}") from exc
        except BotoCoreError as exc:
            raise UpstreamUnavailable(f"failed to inspect S3 object: {exc}") from exc


def build_storage_adapter(settings) -> StorageAdapter | None:
    """Create the S3 adapter, or ``None`` when the object store is not configured."""
    if not settings.object_store_configured:
        logger.warning("Object store not configured; upload features are disabled")
        return None
    return S3StorageAdapter(
        bucket=settings.aws_s3_bucket,
        region=settings.aws_region,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
    )
