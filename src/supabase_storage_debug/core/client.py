"""Supabase client wrapper for storage operations."""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from supabase import Client, create_client

from .exceptions import ConfigurationError, LocalFileError, StorageApiError
from .models import Bucket, SessionConfig, StorageObject

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CONTROL = "3600"
DEFAULT_LIST_LIMIT = 100

FileSource = Union[str, Path, bytes]


class StorageClient:
    """Thin pass-through over the Supabase storage and auth APIs.

    Every SDK failure is logged and re-raised as StorageApiError so callers
    only have one error type to deal with.
    """

    def __init__(self, client: Client, config: Optional[SessionConfig] = None):
        self.client = client
        self.config = config

    @classmethod
    def connect(cls, config: SessionConfig) -> "StorageClient":
        """Build the client handle. Local only, no network call."""
        try:
            client = create_client(config.service_url, config.api_key)
        except Exception as e:
            logger.error(f"Supabase client initialization failed: {e}")
            raise ConfigurationError(f"Supabase client initialization failed: {e}") from e
        return cls(client, config)

    def list_buckets(self) -> List[Bucket]:
        """List all buckets in the project."""
        try:
            raw_buckets = self.client.storage.list_buckets()
        except Exception as e:
            logger.error(f"Failed to list buckets: {e}")
            raise StorageApiError.from_exception(e, "list_buckets") from e
        return [Bucket.from_api(raw) for raw in raw_buckets or []]

    def list_objects(
        self,
        bucket: str,
        prefix: str = "",
        limit: int = DEFAULT_LIST_LIMIT,
        offset: int = 0,
    ) -> List[StorageObject]:
        """List one page of entries directly under a prefix.

        Args:
            bucket: Bucket name
            prefix: Folder path inside the bucket ("" for the root)
            limit: Page size
            offset: Entries to skip

        Returns:
            Entries at that level; folders have no id
        """
        try:
            entries = self.client.storage.from_(bucket).list(
                prefix or "", {"limit": limit, "offset": offset}
            )
        except Exception as e:
            logger.error(f"Failed to list files in bucket {bucket}: {e}")
            raise StorageApiError.from_exception(e, "list") from e
        return [StorageObject.from_api(entry) for entry in entries or []]

    def upload(
        self,
        bucket: str,
        path: str,
        source: FileSource,
        content_type: str,
        cache_control: str = DEFAULT_CACHE_CONTROL,
        upsert: bool = True,
    ) -> str:
        """Upload a local file or an in-memory buffer.

        Args:
            bucket: Bucket name
            path: Destination path in the bucket
            source: Local file path, or raw bytes
            content_type: MIME type sent with the object
            cache_control: Cache-Control max-age in seconds
            upsert: Overwrite an existing object at the same path

        Returns:
            The stored path reported by the API
        """
        file_options = {
            "content-type": content_type,
            "cache-control": cache_control,
            "upsert": "true" if upsert else "false",
        }
        try:
            if isinstance(source, bytes):
                response = self.client.storage.from_(bucket).upload(path, source, file_options)
            else:
                with open(source, "rb") as f:
                    response = self.client.storage.from_(bucket).upload(path, f, file_options)
        except OSError as e:
            logger.error(f"Failed to read {source}: {e}")
            raise LocalFileError(f"Cannot read local file: {e}", str(source)) from e
        except Exception as e:
            logger.error(f"Failed to upload {bucket}/{path}: {e}")
            raise StorageApiError.from_exception(e, "upload") from e

        # storage3 echoes the destination path back
        return getattr(response, "path", None) or path

    def download(self, bucket: str, path: str) -> bytes:
        """Download an object's bytes."""
        try:
            return self.client.storage.from_(bucket).download(path)
        except Exception as e:
            logger.error(f"Failed to download {bucket}/{path}: {e}")
            raise StorageApiError.from_exception(e, "download") from e

    def remove(self, bucket: str, paths: Sequence[str]) -> None:
        """Delete objects."""
        try:
            self.client.storage.from_(bucket).remove(list(paths))
        except Exception as e:
            logger.error(f"Failed to delete {paths} from bucket {bucket}: {e}")
            raise StorageApiError.from_exception(e, "remove") from e

    def get_public_url(self, bucket: str, path: str) -> Optional[str]:
        """Construct an object's public URL.

        This is string construction only; it does not prove the object is
        readable.
        """
        try:
            url = self.client.storage.from_(bucket).get_public_url(path)
        except Exception as e:
            logger.error(f"Failed to build public URL for {bucket}/{path}: {e}")
            raise StorageApiError.from_exception(e, "get_public_url") from e
        return url or None

    def get_current_user(self) -> Optional[Any]:
        """Return the user of the current auth session, if any."""
        try:
            response = self.client.auth.get_user()
        except Exception as e:
            logger.debug(f"Auth session query failed: {e}")
            raise StorageApiError.from_exception(e, "get_user") from e
        if response is None:
            return None
        return getattr(response, "user", None)
