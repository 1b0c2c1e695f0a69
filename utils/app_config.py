"""Process configuration loaded from environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from utils.database_init import TABLE_NAME_RE

DEFAULT_STORAGE_NAME = "images"
DEFAULT_PUBLIC_BASE_URL = "http://localhost:8000"
DEFAULT_AZURE_API_VERSION = "2024-02-01"
DEFAULT_IMAGE_MODEL = "dall-e-2"

# Blob container naming rules of the storage service being modelled.
_CONTAINER_NAME_RE = re.compile(r"^[a-z0-9](?!.*--)[a-z0-9-]{1,61}[a-z0-9]$")


def _require_dir(env: Mapping[str, str], name: str) -> Path:
    """Return the directory named by `name`, creating it when missing."""
    raw = env.get(name)
    if raw is None or not raw.strip():
        raise RuntimeError(f"{name} environment variable must be set to a writable directory path.")

    path = Path(raw).expanduser()
    if path.exists() and not path.is_dir():
        raise RuntimeError(f"{name}={raw!r} points to a file, not a directory ({path}).")

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise RuntimeError(f"Failed to create or access directory at {path}") from exc
    return path


@dataclass(frozen=True)
class AppConfig:
    """Settings injected at process start.

    Attributes:
        openai_api_key: Key for the image generation service.
        database_dir: Directory holding the SQLite metadata database.
        storage_dir: Root directory of the blob store.
        container_name: Blob container receiving generated images.
        table_name: Metadata table holding image records.
        public_base_url: Absolute base URL the service is reachable at.
        image_model: Model (or Azure deployment) used for generation.
        azure_endpoint: Azure OpenAI endpoint; plain OpenAI when None.
        azure_api_version: API version sent to Azure OpenAI.
    """

    openai_api_key: str
    database_dir: Path
    storage_dir: Path
    container_name: str = DEFAULT_STORAGE_NAME
    table_name: str = DEFAULT_STORAGE_NAME
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    image_model: str = DEFAULT_IMAGE_MODEL
    azure_endpoint: Optional[str] = None
    azure_api_version: str = DEFAULT_AZURE_API_VERSION

    def __post_init__(self) -> None:
        if not _CONTAINER_NAME_RE.match(self.container_name):
            raise RuntimeError(f"Invalid blob container name: {self.container_name!r}")
        if not TABLE_NAME_RE.match(self.table_name):
            raise RuntimeError(f"Invalid table name: {self.table_name!r}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build the configuration from `env` (defaults to `os.environ`)."""
        env = os.environ if env is None else env

        api_key = env.get("OPENAI_API_KEY")
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY environment variable is not set")

        return cls(
            openai_api_key=api_key,
            database_dir=_require_dir(env, "DATABASE_DIR"),
            storage_dir=_require_dir(env, "STORAGE_DIR"),
            container_name=env.get("IMAGE_CONTAINER_NAME", DEFAULT_STORAGE_NAME),
            table_name=env.get("IMAGE_TABLE_NAME", DEFAULT_STORAGE_NAME),
            public_base_url=env.get("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).rstrip("/"),
            image_model=env.get("OPENAI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            azure_endpoint=env.get("AZURE_OPENAI_ENDPOINT") or None,
            azure_api_version=env.get("AZURE_OPENAI_API_VERSION", DEFAULT_AZURE_API_VERSION),
        )
