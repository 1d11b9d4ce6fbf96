"""
Wallpaper Store
===============

Owns the single "latest wallpaper" file. Writes go to a temporary file in the
same directory and replace the artifact atomically, so readers that already
opened the previous file keep reading it unchanged.
"""

from typing import Any, AsyncIterator
from pathlib import Path
import uuid

import aiofiles
import aiofiles.os

from vocab_wallpaper.config.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


class StoreWriteFailure(Exception):
    """Exception raised when the wallpaper cannot be persisted."""

    pass


class ArtifactAbsent(Exception):
    """Exception raised when no wallpaper has been generated yet."""

    pass


class WallpaperStore:
    """Handle to the wallpaper artifact location."""

    def __init__(self, path: Path):
        self._path = Path(path)
        self.logger: Any = logger.bind(component="wallpaper_store")  # structlog.BoundLoggerBase

    def __repr__(self) -> str:
        return f"WallpaperStore({str(self._path)!r})"

    @property
    def path(self) -> Path:
        """Location of the artifact."""
        return self._path

    def exists(self) -> bool:
        """Check whether an artifact is present."""
        return self._path.is_file()

    def ensure_directory(self) -> None:
        """Create the artifact directory if missing."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

    async def write(self, data: bytes) -> None:
        """
        Replace the artifact with new PNG bytes.

        Args:
            data: Encoded image

        Raises:
            StoreWriteFailure: If the bytes cannot be written; the previous artifact is kept
        """
        if not data:
            raise StoreWriteFailure("Refusing to store an empty image")

        tmp_path = self._path.with_name(f".{self._path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, self._path)
        except OSError as e:
            await self._discard(tmp_path)
            error_msg = f"Failed to store wallpaper at {self._path}: {e}"
            self.logger.error("Wallpaper write failed", error=error_msg)
            raise StoreWriteFailure(error_msg) from e

        self.logger.info("Wallpaper stored", path=str(self._path), file_size=len(data))

    async def open_artifact(self) -> Any:
        """
        Open the artifact for reading.

        Returns:
            aiofiles binary file handle; the caller closes it

        Raises:
            ArtifactAbsent: If no artifact exists
        """
        try:
            return await aiofiles.open(self._path, "rb")
        except FileNotFoundError as e:
            raise ArtifactAbsent(f"No wallpaper at {self._path}") from e

    async def iter_artifact(self, handle: Any, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream an opened artifact in chunks and close it."""
        try:
            while True:
                chunk = await handle.read(chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await handle.close()

    async def _discard(self, tmp_path: Path) -> None:
        """Remove a leftover temporary file."""
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Could not remove temporary file", path=str(tmp_path), error=str(e))
