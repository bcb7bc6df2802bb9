"""Filesystem store for synthesized audio artifacts.

Artifacts live under ``<root>/ElevenLabs/TextToSpeech/<key>.mp3`` and are
write-once. Data is streamed into a hidden ``.part`` file in the same
directory, then published with a hard link, which fails instead of
replacing an existing file. Readers therefore only ever see complete
artifacts, and concurrent writers of the same key cannot clobber each other.
"""

import asyncio
import contextlib
import logging
import os
import stat
import uuid
from collections.abc import AsyncIterable, AsyncIterator, Callable
from pathlib import Path
from typing import Any, BinaryIO

from ..tts.errors import ArtifactExistsError

logger = logging.getLogger(__name__)

AUDIO_SUFFIX = ".mp3"
PARTIAL_SUFFIX = ".part"


def _flush_and_sync(sink: BinaryIO) -> None:
    sink.flush()
    os.fsync(sink.fileno())


def _is_empty_file(path: Path) -> bool:
    try:
        st = path.stat()
    except FileNotFoundError:
        return False
    return stat.S_ISREG(st.st_mode) and st.st_size == 0


def _discard_opened(opening: "asyncio.Future[BinaryIO]") -> None:
    if opening.cancelled() or opening.exception() is not None:
        return
    sink = opening.result()
    sink.close()
    with contextlib.suppress(FileNotFoundError):
        os.unlink(sink.name)


async def _open_exclusive(path: Path) -> BinaryIO:
    """Create path exclusively in a worker thread.

    If the caller is cancelled mid-open, the thread still finishes; the file
    it produced is closed and removed once it does.
    """
    opening = asyncio.ensure_future(asyncio.to_thread(open, path, "xb"))
    try:
        return await asyncio.shield(opening)
    except asyncio.CancelledError:
        opening.add_done_callback(_discard_opened)
        raise


async def _run_to_completion(func: Callable[..., None], *args: Any) -> None:
    """Run func in a worker thread, finishing it even if the caller is cancelled."""
    running = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        await asyncio.shield(running)
    except asyncio.CancelledError:
        # The thread cannot be stopped; settle its outcome before unwinding
        with contextlib.suppress(Exception):
            await running
        raise


class ArtifactStore:
    """Write-once artifact storage rooted at a caller-supplied directory.

    Example:
        store = ArtifactStore(Path("/tmp/audio"))
        if not store.exists(key):
            path = await store.write(key, chunks)
    """

    def __init__(self, root_directory: Path | str) -> None:
        """Initialize the store.

        Args:
            root_directory: Base directory; the ElevenLabs/TextToSpeech
                subdirectories are created beneath it on demand
        """
        self.root_directory = Path(root_directory)
        self.directory = self.root_directory / "ElevenLabs" / "TextToSpeech"

    def ensure_directory(self) -> Path:
        """Create the artifact directory if needed and return it."""
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def path_for(self, key: str) -> Path:
        """Return the final artifact path for a cache key."""
        return self.directory / f"{key}{AUDIO_SUFFIX}"

    def exists(self, key: str) -> bool:
        """Return True if a complete, non-empty artifact is stored for key."""
        try:
            st = self.path_for(key).stat()
        except FileNotFoundError:
            return False
        return stat.S_ISREG(st.st_mode) and st.st_size > 0

    @contextlib.asynccontextmanager
    async def create(self, key: str) -> AsyncIterator[BinaryIO]:
        """Open an exclusive sink that becomes the artifact on clean exit.

        The sink is flushed, synced and closed before publication. If the
        body raises, or the task is cancelled before publication starts, the
        partial file is removed and nothing appears at the artifact path.
        Publication itself is not interruptible: a cancellation that lands
        while the hard link is being made waits for it, so the artifact may
        be complete on disk when ``CancelledError`` propagates.

        An empty file already sitting at the artifact path is never a cache
        hit, so it is replaced rather than reported as existing.

        Raises:
            ArtifactExistsError: If the artifact is already present, either
                before writing starts or when publishing
            OSError: For any other filesystem failure
        """
        target = self.path_for(key)
        if self.exists(key):
            raise ArtifactExistsError(f"Artifact already exists: {target}")

        self.ensure_directory()
        partial = self.directory / f".{key}.{uuid.uuid4().hex}{PARTIAL_SUFFIX}"
        try:
            sink = await _open_exclusive(partial)
            try:
                yield sink
                await asyncio.to_thread(_flush_and_sync, sink)
            finally:
                sink.close()
            await _run_to_completion(self._publish, partial, target)
        except BaseException:
            logger.debug(f"Discarding partial artifact {partial.name}")
            raise
        finally:
            with contextlib.suppress(FileNotFoundError):
                partial.unlink()

    async def write(self, key: str, chunks: AsyncIterable[bytes]) -> Path:
        """Copy a byte stream fully into a new artifact.

        Args:
            key: Cache key naming the artifact
            chunks: Single-pass stream of audio bytes

        Returns:
            Path to the published artifact

        Raises:
            ArtifactExistsError: If another writer published the key first
            OSError: If the stream was empty or the write failed
        """
        async with self.create(key) as sink:
            written = 0
            async for chunk in chunks:
                if chunk:
                    await asyncio.to_thread(sink.write, chunk)
                    written += len(chunk)
            if not written:
                raise OSError(f"Refusing to store empty artifact for {key}")

        target = self.path_for(key)
        logger.info(f"Stored {written} bytes at {target}")
        return target

    @staticmethod
    def _publish(partial: Path, target: Path) -> None:
        try:
            os.link(partial, target)
        except FileExistsError as e:
            if not _is_empty_file(target):
                raise ArtifactExistsError(f"Artifact already exists: {target}") from e

            logger.warning(f"Replacing empty file at {target}")
            target.unlink(missing_ok=True)
            try:
                os.link(partial, target)
            except FileExistsError as retry_error:
                raise ArtifactExistsError(
                    f"Artifact already exists: {target}"
                ) from retry_error
