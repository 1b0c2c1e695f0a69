"""Description: Text-to-image generation service using OpenAI's Images API."""

import logging
import time
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from utils.app_config import DEFAULT_IMAGE_MODEL

LOGGER = logging.getLogger(__name__)
IMAGE_SIZE = "512x512"
IMAGE_USER = "user"
UNEXPECTED_COUNT_MESSAGE = "Something caused it to not generate an image"


class ImageGenerationError(Exception):
    """The generation service did not produce exactly one usable image."""


class ImageGenerator:
    """Generate a single image for a prompt and return its external URL."""

    def __init__(self, client: AsyncOpenAI, model: Optional[str] = None) -> None:
        """Initialize the ImageGenerator with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model or DEFAULT_IMAGE_MODEL

    async def generate(self, prompt: str) -> str:
        """Request one 512x512 image and return the URL it is hosted at.

        The returned URL belongs to the generation service and expires, so
        callers are expected to copy the image into owned storage.

        Raises:
            ImageGenerationError: If the call failed or did not return exactly
                one image URL.
        """
        start_time = time.time()
        response = await self._create_image(prompt)
        url = self._parse_response(response)
        LOGGER.info("Image generation latency: %.3fs", time.time() - start_time)
        return url

    async def _create_image(self, prompt: str) -> Any:
        """Send the generation request to the OpenAI Images API."""
        try:
            return await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                n=1,
                size=IMAGE_SIZE,
                response_format="url",
                user=IMAGE_USER,
            )
        except OpenAIError as exc:
            LOGGER.error("Error during OpenAI Images API call: %s", exc)
            raise ImageGenerationError(str(exc)) from exc

    def _parse_response(self, response: Any) -> str:
        """Return the single image URL, rejecting any other image count."""
        data = getattr(response, "data", None) if response is not None else None
        if not data or len(data) != 1:
            LOGGER.error(
                "Expected exactly one generated image, received %d.", len(data or [])
            )
            raise ImageGenerationError(UNEXPECTED_COUNT_MESSAGE)

        url = getattr(data[0], "url", None)
        if not url:
            LOGGER.error("Generated image is missing a URL: %r", data[0])
            raise ImageGenerationError(UNEXPECTED_COUNT_MESSAGE)
        return url
