#!/usr/bin/env python3
"""
Remote R2 Bucket Access

Listing and download operations against a Cloudflare R2 bucket through the
S3-compatible API.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import aioboto3
import aiobotocore.config
import aiohttp
from botocore.exceptions import BotoCoreError, ClientError

from .config import R2Credentials
from .constants import LIST_PAGE_SIZE, R2_REGION
from .exceptions import DownloadError, RemoteListError

logger = logging.getLogger(__name__)

REMOTE_ERRORS = (ClientError, BotoCoreError, aiohttp.ClientError)


@dataclass(frozen=True)
class RemoteObject:
    """Snapshot of one entry from a bucket listing."""

    key: str | None
    size: int = 0
    etag: str | None = None
    last_modified: datetime | None = None

    @classmethod
    def from_listing(cls, entry: dict[str, Any]) -> "RemoteObject":
        return cls(
            key=entry.get("Key"),
            size=entry.get("Size", 0),
            etag=entry.get("ETag"),
            last_modified=entry.get("LastModified"),
        )


@asynccontextmanager
async def create_r2_client(credentials: R2Credentials) -> AsyncGenerator[Any, None]:
    """Create an S3 client for the R2 endpoint of an account."""
    # R2 rejects the flexible checksum headers newer botocore releases send by default
    config = aiobotocore.config.AioConfig(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
    )
    session = aioboto3.Session()

    logger.info(f"Creating R2 client for {credentials.endpoint_url}")
    async with session.client(
        "s3",
        endpoint_url=credentials.endpoint_url,
        region_name=R2_REGION,
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        config=config,
    ) as client:
        yield client


class RemoteBucket:
    """A single remote bucket reached through an S3 client."""

    def __init__(self, client: Any, bucket_name: str, page_size: int = LIST_PAGE_SIZE):
        self.client = client
        self.bucket_name = bucket_name
        self.page_size = page_size

    async def list_objects(self) -> list[RemoteObject]:
        """
        List every object in the bucket, following continuation tokens.

        Returns:
            All objects in listing order

        Raises:
            RemoteListError: If any listing request fails
        """
        objects: list[RemoteObject] = []
        continuation_token: str | None = None
        pages = 0

        while True:
            params: dict[str, Any] = {"Bucket": self.bucket_name, "MaxKeys": self.page_size}
            if continuation_token:
                params["ContinuationToken"] = continuation_token

            try:
                response = await self.client.list_objects_v2(**params)
            except REMOTE_ERRORS as e:
                logger.error(f"Failed to list remote objects in '{self.bucket_name}': {e}")
                raise RemoteListError(f"Failed to list objects in bucket '{self.bucket_name}': {e}") from e

            pages += 1
            objects.extend(RemoteObject.from_listing(entry) for entry in response.get("Contents", []))

            continuation_token = response.get("NextContinuationToken")
            if not continuation_token:
                break

        logger.debug(f"Listed {len(objects)} objects from '{self.bucket_name}' in {pages} page(s)")
        return objects

    async def download(self, key: str) -> bytes:
        """
        Download the full body of an object into memory.

        Raises:
            DownloadError: If the request or the body stream fails, or the response has no body
        """
        try:
            response = await self.client.get_object(Bucket=self.bucket_name, Key=key)
            body = response.get("Body")
            if body is None:
                raise DownloadError(f"No body in response for {key}")
            try:
                data = await body.read()
            finally:
                body.close()
        except REMOTE_ERRORS as e:
            logger.error(f"Failed to download {key}: {e}")
            raise DownloadError(f"Failed to download {key}: {e}") from e

        logger.debug(f"Downloaded {key} ({len(data)} bytes)")
        return data
