"""Shared pytest fixtures for the image service tests."""

import asyncio
import shutil
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Generator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.image_store import BlobImageStore
from services.openai.image_generator import ImageGenerator
from utils.app_config import AppConfig
from utils.database_init import AsyncDatabaseInitializer

EXTERNAL_IMAGE_URL = "https://generated.example.net/private/img-abc.png?sig=xyz"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 64


class FakeImages:
    """Stand-in for `AsyncOpenAI().images` recording every call."""

    def __init__(self, urls: Optional[List[str]] = None, error: Optional[Exception] = None) -> None:
        self.urls = [EXTERNAL_IMAGE_URL] if urls is None else urls
        self.error = error
        self.calls: List[dict] = []

    async def generate(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(data=[SimpleNamespace(url=url) for url in self.urls])


class FakeOpenAIClient:
    def __init__(self, images: FakeImages) -> None:
        self.images = images


def image_host_transport(body: bytes = PNG_BYTES, status_code: int = 200) -> httpx.MockTransport:
    """Serve `body` for every GET, standing in for the generation service's image host."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body, headers={"content-type": "image/png"})

    return httpx.MockTransport(handler)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> AppConfig:
    """Create a test configuration rooted in a temporary directory."""
    return AppConfig(
        openai_api_key="test-key",
        database_dir=temp_dir / "database",
        storage_dir=temp_dir / "storage",
        public_base_url="https://store.example.com",
    )


@pytest.fixture
def fake_images() -> FakeImages:
    return FakeImages()


@pytest.fixture
def db_initializer(test_config: AppConfig) -> AsyncDatabaseInitializer:
    return AsyncDatabaseInitializer(test_config.database_dir)


@pytest.fixture
def test_client(test_config: AppConfig, fake_images: FakeImages) -> Generator[TestClient, None, None]:
    """TestClient with the OpenAI client and image host replaced by fakes."""
    app = create_app(test_config)
    image_host = httpx.AsyncClient(transport=image_host_transport())
    try:
        with TestClient(app) as client:
            app.state.image_generator = ImageGenerator(FakeOpenAIClient(fake_images), model="dall-e-2")
            app.state.image_store = BlobImageStore(
                root_dir=test_config.storage_dir,
                container_name=test_config.container_name,
                public_base_url=test_config.public_base_url,
                http_client=image_host,
            )
            yield client
    finally:
        asyncio.run(image_host.aclose())
