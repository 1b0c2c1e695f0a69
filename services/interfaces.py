"""Narrow capability interfaces consumed by the image controller.

The controller only depends on these shapes, so tests can swap the OpenAI,
blob and table adapters for in-memory fakes.
"""

from __future__ import annotations

from typing import Optional, Protocol

from models.image_record import ImageRecord


class ImageGeneratorProtocol(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return the external URL of exactly one generated image."""
        ...


class ImageStoreProtocol(Protocol):
    async def upload(self, image_id: str, source_url: str) -> str:
        """Copy the image at `source_url` into owned storage and return its URI."""
        ...


class ImageMetadataStoreProtocol(Protocol):
    async def upsert(self, record: ImageRecord) -> None:
        ...

    async def get(self, image_id: str) -> Optional[ImageRecord]:
        ...
