import inspect
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from openai import AsyncAzureOpenAI, AsyncOpenAI

from dal.image_dal import ImageDAL
from routes.image_route import router as image_router
from services.image_store import BlobImageStore
from services.openai.image_generator import ImageGenerator
from utils.app_config import AppConfig
from utils.database_init import AsyncDatabaseInitializer

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
LOGGER = logging.getLogger(__name__)


def build_openai_client(config: AppConfig) -> AsyncOpenAI:
    """Return the async client for the configured generation service."""
    try:
        if config.azure_endpoint:
            return AsyncAzureOpenAI(
                api_key=config.openai_api_key,
                azure_endpoint=config.azure_endpoint,
                api_version=config.azure_api_version,
                max_retries=0,
            )
        return AsyncOpenAI(api_key=config.openai_api_key, max_retries=0)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc


async def _aclose_quietly(client: Any) -> None:
    """Close a client exposing `aclose` or `close`, logging shutdown errors."""
    if client is None:
        return
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        result = aclose()
        if inspect.isawaitable(result):
            await result
    except Exception as exc:
        LOGGER.warning("Error while closing %s: %s", type(client).__name__, exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the process configuration (from the environment unless preset)
      - the OpenAI async client and the image generator
      - the blob image store, mounted publicly at /<container>
      - the SQLite metadata store
    and attach them to `app.state`.
    """
    config: Optional[AppConfig] = getattr(app.state, "config", None)
    if config is None:
        config = AppConfig.from_env()
        app.state.config = config

    openai_client = build_openai_client(config)
    http_client = httpx.AsyncClient()

    image_store = BlobImageStore(
        root_dir=config.storage_dir,
        container_name=config.container_name,
        public_base_url=config.public_base_url,
        http_client=http_client,
    )
    container_dir = await image_store.ensure_container()
    # Public read access for the container.
    app.mount(
        f"/{config.container_name}",
        StaticFiles(directory=container_dir, check_dir=False),
        name=config.container_name,
    )

    db_initializer = AsyncDatabaseInitializer(config.database_dir)

    app.state.openai_client = openai_client
    app.state.http_client = http_client
    app.state.db_initializer = db_initializer
    app.state.image_generator = ImageGenerator(openai_client, model=config.image_model)
    app.state.image_store = image_store
    app.state.image_dal = ImageDAL(db_initializer, table_name=config.table_name)

    try:
        yield
    finally:
        await _aclose_quietly(getattr(app.state, "openai_client", None))
        await _aclose_quietly(getattr(app.state, "http_client", None))


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        config: Settings to use; read from the environment at startup when omitted.
    """
    app = FastAPI(lifespan=lifespan)
    if config is not None:
        app.state.config = config

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies the shared clients are present.
        """
        state = request.app.state
        return {
            "ok": True,
            "db_initialized": getattr(state, "db_initializer", None) is not None,
            "openai_available": getattr(state, "openai_client", None) is not None,
            "storage_available": getattr(state, "image_store", None) is not None,
        }

    # Register application routers
    app.include_router(image_router)

    return app


app = create_app()
