"""Amazon S3 image storage implementation."""

from __future__ import annotations

import uuid
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

from .abstract_storage import AbstractStorage, StorageError, StoredImage


class S3Storage(AbstractStorage):
    """Keep images in an S3 bucket under the ``images/`` prefix."""

    prefix = "images"

    def __init__(
        self,
        bucket: str,
        region: str,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client=None,
    ):
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region,
        )

    def _url_for(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, data: bytes, filename: str, content_type: str | None = None) -> StoredImage:
        suffix = Path(secure_filename(filename) or "").suffix.lower()
        key = f"{self.prefix}/{uuid.uuid4().hex}{suffix}"
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(str(exc)) from exc
        return StoredImage(url=self._url_for(key), public_id=key)

    def delete(self, public_id: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(str(exc)) from exc
