"""
S3 bucket source.

Lists object keys under a prefix with paginated list_objects_v2 calls and
streams object bodies chunk by chunk. Bodies are decoded incrementally, so a
multi-byte character split across two network chunks still decodes.

Dependencies: boto3
System role: Item listing and content fetching for S3 objects
"""

import codecs
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from chunkstream.core.exceptions import ItemFetchError, SourceListingError

logger = logging.getLogger(__name__)


class S3Object(BaseModel):
    """One listed S3 object."""

    key: str = Field(description="Object key")
    size: int = Field(default=0, description="Object size in bytes")
    last_modified: datetime | None = Field(default=None, description="Last modification time")


class S3Source:
    """List and stream objects under an S3 prefix."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: str = "ap-southeast-2",
        page_size: int = 50,
        start_token: str | None = None,
        read_chunk_size: int = 64 * 1024,
        client: Any | None = None,
    ) -> None:
        """
        Initialize S3 source.

        Args:
            bucket: S3 bucket name
            prefix: Key prefix to list under
            region: AWS region for S3 bucket
            page_size: MaxKeys per listing page
            start_token: Continuation token to resume listing from
            read_chunk_size: Bytes per read when streaming an object body
            client: Preconfigured boto3 S3 client (created from region if None)
        """
        self._bucket = bucket
        self._prefix = prefix
        self._region = region
        self._page_size = page_size
        self._start_token = start_token
        self._read_chunk_size = read_chunk_size
        self._s3_client = client or boto3.client("s3", region_name=region)

    def describe(self) -> str:
        return f"s3://{self._bucket}/{self._prefix}"

    def list_objects(self) -> list[S3Object]:
        """
        List every object under the prefix, following continuation tokens.

        Returns:
            list[S3Object]: Objects in listing order

        Raises:
            SourceListingError: When any listing page fails
        """
        objects: list[S3Object] = []
        token = self._start_token
        pages = 0

        try:
            while True:
                params: dict[str, Any] = {
                    "Bucket": self._bucket,
                    "Prefix": self._prefix,
                    "MaxKeys": self._page_size,
                }
                if token:
                    params["ContinuationToken"] = token

                response = self._s3_client.list_objects_v2(**params)
                pages += 1

                for item in response.get("Contents", []):
                    objects.append(
                        S3Object(
                            key=item.get("Key", ""),
                            size=item.get("Size", 0),
                            last_modified=item.get("LastModified"),
                        )
                    )

                token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
                if not token:
                    break
        except (ClientError, BotoCoreError) as e:
            raise SourceListingError(
                f"Failed to list S3 objects: {e}", source=self.describe()
            ) from e

        logger.info(
            f"{__name__}:list_objects - Listed {len(objects)} objects from {self.describe()} "
            f"in {pages} pages"
        )
        return objects

    def list_items(self) -> list[str]:
        """List object keys under the prefix."""
        return [obj.key for obj in self.list_objects() if obj.key]

    @contextmanager
    def fetch(self, item_id: str) -> Iterator[Iterator[str]]:
        """
        Open an object body for streaming.

        Args:
            item_id: S3 object key

        Yields:
            Iterator[str]: Decoded text pieces; empty when the object has no body

        Raises:
            ItemFetchError: When the object cannot be fetched, read or decoded
        """
        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=item_id)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise ItemFetchError(f"File not found in S3: {item_id}", item_id=item_id) from e
            raise ItemFetchError(f"Failed to fetch from S3: {e}", item_id=item_id) from e
        except BotoCoreError as e:
            raise ItemFetchError(f"Failed to fetch from S3: {e}", item_id=item_id) from e

        body = response.get("Body")
        if body is None:
            yield iter(())
            return

        try:
            yield self._decode_stream(body, item_id)
        finally:
            body.close()

    def _decode_stream(self, body: Any, item_id: str) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder("utf-8")()
        try:
            for chunk in body.iter_chunks(chunk_size=self._read_chunk_size):
                text = decoder.decode(chunk)
                if text:
                    yield text
            tail = decoder.decode(b"", final=True)
            if tail:
                yield tail
        except UnicodeDecodeError as e:
            raise ItemFetchError(f"Object is not valid UTF-8: {e}", item_id=item_id) from e
        except (ClientError, BotoCoreError, OSError) as e:
            raise ItemFetchError(f"Failed to read S3 object body: {e}", item_id=item_id) from e
