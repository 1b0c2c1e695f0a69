"""Blob-style storage for generated images.

Images live in a single container directory under the storage root, keyed
`<id>.png`. The container is public-read: the application mounts it at
`/<container>`, so the URI returned by `upload` is directly retrievable.
Bytes are streamed from the generation service into the container without
buffering the whole image in memory.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

LOGGER = logging.getLogger(__name__)
BLOB_EXTENSION = "png"


class BlobImageStore:
    """Upload images fetched from external URLs into an owned container."""

    def __init__(
        self,
        root_dir: Path | str,
        container_name: str,
        public_base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Args:
            root_dir: Root directory of the blob store.
            container_name: Container (sub-directory) receiving the images.
            public_base_url: Absolute base URL the container is mounted under.
            http_client: Client used to download source images; one is
                created per upload when omitted.
        """
        self.root_dir = Path(root_dir)
        self.container_name = container_name
        self.public_base_url = public_base_url.rstrip("/")
        self._http = http_client

    @property
    def container_dir(self) -> Path:
        return self.root_dir / self.container_name

    def blob_name(self, image_id: str) -> str:
        return f"{image_id}.{BLOB_EXTENSION}"

    def blob_path(self, image_id: str) -> Path:
        """Return the on-disk path of the blob for `image_id`."""
        return self.container_dir / self.blob_name(image_id)

    def blob_uri(self, image_id: str) -> str:
        """Return the public URI of the blob for `image_id`."""
        return f"{self.public_base_url}/{self.container_name}/{self.blob_name(image_id)}"

    async def ensure_container(self) -> Path:
        """Create the container if it does not exist yet. Safe to call repeatedly."""
        self.container_dir.mkdir(parents=True, exist_ok=True)
        return self.container_dir

    async def upload(self, image_id: str, source_url: str) -> str:
        """Stream the image at `source_url` into the container and return its URI.

        An existing blob with the same id is replaced. The download is written
        to a temporary sibling first so a failed stream never leaves a
        truncated object under the final key.

        Raises:
            httpx.HTTPError: If the source could not be downloaded.
            OSError: If the blob could not be written.
        """
        await self.ensure_container()
        target = self.blob_path(image_id)
        partial = target.with_name(f".{target.name}.{uuid.uuid4().hex}.part")

        try:
            if self._http is not None:
                await self._stream_to_file(self._http, source_url, partial)
            else:
                async with httpx.AsyncClient() as client:
                    await self._stream_to_file(client, source_url, partial)
            os.replace(partial, target)
        except BaseException as exc:
            LOGGER.error("Failed to upload image %s: %r", image_id, exc)
            partial.unlink(missing_ok=True)
            raise

        return self.blob_uri(image_id)

    @staticmethod
    async def _stream_to_file(client: httpx.AsyncClient, source_url: str, path: Path) -> None:
        """Copy the response body of GET `source_url` into `path` chunk by chunk."""
        async with client.stream("GET", source_url) as response:
            response.raise_for_status()
            async with aiofiles.open(path, "wb") as f:
                async for chunk in response.aiter_bytes():
                    await f.write(chunk)
