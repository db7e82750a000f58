"""Image storage for listing submissions."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ulid import ULID

from src.utils.config import EngineConfig
from src.utils.errors import FileStorageError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    """Image attached to a listing submission."""
    content: bytes
    filename: str


class FileStorage(ABC):
    """Stores uploaded files and returns a reference string for them."""

    @abstractmethod
    async def save(self, content: bytes, original_name: str) -> str:
        ...


class LocalFileStorage(FileStorage):
    """Writes uploads under a local directory served at url_prefix."""

    def __init__(self, root_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        self.root_dir = Path(root_dir or EngineConfig.UPLOAD_DIR)
        prefix = url_prefix or EngineConfig.UPLOAD_URL_PREFIX
        self.url_prefix = prefix if prefix.endswith("/") else prefix + "/"

    async def save(self, content: bytes, original_name: str) -> str:
        """Save content under a fresh name keeping the original extension."""
        extension = os.path.splitext(original_name)[1].lower()
        file_name = f"{ULID()}{extension}"

        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
            (self.root_dir / file_name).write_bytes(content)
        except OSError as e:
            raise FileStorageError(f"Failed to store {original_name}: {e}") from e

        logger.info(
            "Stored listing image",
            original_name=original_name,
            stored_name=file_name,
            size_bytes=len(content)
        )
        return self.url_prefix + file_name
