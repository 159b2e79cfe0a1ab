"""
Object storage for tour images (S3 or an S3-compatible store).
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Protocol
from urllib.parse import quote

import boto3
from botocore.config import Config
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ..core.config import Settings
from ..core.observability import metrics_collector

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    """Defines the operations the API needs from object storage."""

    async def upload(self, file: UploadFile, field_name: str) -> str:
        ...

    async def upload_many(self, files: Iterable[UploadFile], field_name: str) -> List[str]:
        ...


def build_object_key(prefix: str, filename: Optional[str]) -> str:
    """Return ``<prefix>/<epoch-millis>-<random>-<filename>``."""
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{prefix}/{unique_suffix}-{filename or 'upload'}"


@dataclass
class S3ObjectStorage:
    """
    Public-read image bucket backed by boto3.

    boto3 calls block, so uploads run in Starlette's threadpool.
    """

    bucket: str
    region: str
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None
    key_prefix: str = "tour"
    client: Any = field(default=None, repr=False)

    def __post_init__(self):
        if self.client is None:
            self.client = boto3.client(
                "s3",
                endpoint_url=self.endpoint_url,
                region_name=self.region,
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                config=Config(signature_version="s3v4"),
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStorage":
        return cls(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
            endpoint_url=settings.s3_endpoint_url,
            key_prefix=settings.s3_key_prefix,
        )

    def public_url(self, key: str) -> str:
        quoted = quote(key)
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{quoted}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quoted}"

    def _put_object(self, key: str, body: bytes, content_type: Optional[str], field_name: str) -> None:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ACL="public-read",
            ContentType=content_type or "application/octet-stream",
            Metadata={"fieldName": field_name},
        )

    async def upload(self, file: UploadFile, field_name: str) -> str:
        """
        Store one uploaded file and return its public URL.

        Args:
            file: Multipart file part
            field_name: Form field the file arrived under, kept as metadata

        Returns:
            str: Public URL of the stored object
        """
        key = build_object_key(self.key_prefix, file.filename)
        body = await file.read()
        await run_in_threadpool(self._put_object, key, body, file.content_type, field_name)
        metrics_collector.record_object_uploaded()
        logger.info(
            "Object uploaded",
            extra={"bucket": self.bucket, "key": key, "size": len(body)}
        )
        return self.public_url(key)

    async def upload_many(self, files: Iterable[UploadFile], field_name: str) -> List[str]:
        """
        Upload files one after another and return their URLs in order.

        A failure stops the batch; objects stored before it are left in place.
        """
        urls = []
        for file in files:
            urls.append(await self.upload(file, field_name))
        return urls
