import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from core.config import Settings

log = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the object store rejects or fails a request."""

    def __init__(self, message: str, code: str = "StorageError"):
        super().__init__(message)
        self.code = code


def _error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code") or "ClientError"
    return type(exc).__name__


class ObjectStore:
    """S3 bucket gateway: put and delete objects, build their public URLs."""

    def __init__(self, client, bucket_name: str, region: str):
        self.client = client
        self.bucket_name = bucket_name
        self.region = region

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStore":
        # Falls back to the default credential chain (env, profile, IAM role) when keys are unset
        session = boto3.session.Session(
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_REGION,
        )
        client = session.client("s3", endpoint_url=settings.S3_ENDPOINT_URL)
        return cls(client, settings.AWS_BUCKET_NAME, settings.AWS_REGION)

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{quote(key, safe='')}"

    def put(self, key: str, data: bytes, content_type: Optional[str]) -> str:
        params = {"Bucket": self.bucket_name, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type

        try:
            self.client.put_object(**params)
        except (ClientError, BotoCoreError) as exc:
            code = _error_code(exc)
            log.error("S3 put_object failed for key %s: %s", key, code, exc_info=True)
            raise StorageError(f"Failed to store object {key}", code) from exc

        log.info("Stored object %s (%s bytes)", key, len(data))
        return self.public_url(key)

    def delete(self, key: str) -> bool:
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as exc:
            code = _error_code(exc)
            log.error("S3 delete_object failed for key %s: %s", key, code, exc_info=True)
            raise StorageError(f"Failed to delete object {key}", code) from exc

        log.info("Deleted object %s", key)
        return True

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close:
            close()


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


__all__ = ["ObjectStore", "StorageError", "get_object_store"]
