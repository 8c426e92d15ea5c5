"""
Background-removal backends and the two-tier invocation strategy.

The removal call is tried with the in-memory bytes first. If that raises, the
bytes are written to a scoped temporary file and the call is retried once with
the file path. The temporary directory is removed on every exit path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from io import BytesIO
import logging
from pathlib import Path
import tempfile
from threading import Lock
import time
from typing import Any, Iterator, Optional, Union

from fastapi.concurrency import run_in_threadpool
from PIL import Image

from .errors import EmptyResult, RemovalFailure

logger = logging.getLogger(__name__)

RemovalSource = Union[bytes, Path]


class BackgroundRemover(ABC):
    @abstractmethod
    async def remove(self, source: RemovalSource) -> Any:
        """
        Remove the background from ``source`` (image bytes or a path to them).

        Implementations may return raw bytes, a readable object, or an object
        with a ``data`` bytes attribute.
        """


class RembgRemover(BackgroundRemover):
    """rembg-backed remover sharing one model session across requests."""

    def __init__(self, model_name: str = "u2net"):
        self.model_name = model_name
        self._session = None
        self._lock = Lock()

    def _get_session(self):
        if self._session is not None:
            return self._session
        with self._lock:
            if self._session is None:
                # rembg pulls in onnxruntime and downloads weights on first use.
                from rembg import new_session

                logger.info("Loading rembg session model=%s", self.model_name)
                self._session = new_session(self.model_name)
        return self._session

    def _remove_bytes(self, data: bytes) -> bytes:
        from rembg import remove

        return remove(data, session=self._get_session())

    def _remove_file(self, path: Path) -> BytesIO:
        from rembg import remove

        with Image.open(path) as image:
            image.load()
            output = remove(image, session=self._get_session())
        buffer = BytesIO()
        output.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer

    async def remove(self, source: RemovalSource) -> Any:
        if isinstance(source, Path):
            return await run_in_threadpool(self._remove_file, source)
        return await run_in_threadpool(self._remove_bytes, source)


@contextmanager
def scoped_temp_file(data: bytes, prefix: str = "bg-rem-") -> Iterator[Path]:
    """
    Write ``data`` into a fresh temporary directory and yield the file path.

    File and directory are deleted on exit. Cleanup errors are logged and
    swallowed so they never replace an exception raised inside the block.
    """
    tmp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    tmp_file = tmp_dir / f"input-{int(time.time() * 1000)}.png"
    try:
        tmp_file.write_bytes(data)
        yield tmp_file
    finally:
        try:
            tmp_file.unlink(missing_ok=True)
            tmp_dir.rmdir()
        except OSError as cleanup_err:
            logger.warning("Temp cleanup failed for %s: %s", tmp_dir, cleanup_err)


async def invoke_removal(
    remover: BackgroundRemover,
    image_bytes: bytes,
    temp_prefix: str = "bg-rem-",
) -> Any:
    """
    Run ``remover`` on ``image_bytes`` with a single file-based fallback.

    Any error on the in-memory attempt triggers the fallback, whatever its
    cause.

    Raises:
        RemovalFailure: the fallback attempt raised as well.
        EmptyResult: the successful attempt returned ``None``.
    """
    result: Optional[Any]
    try:
        result = await remover.remove(image_bytes)
    except Exception as first_err:  # noqa: BLE001
        logger.warning("In-memory background removal failed, retrying from file: %s", first_err)
        try:
            with scoped_temp_file(image_bytes, prefix=temp_prefix) as tmp_path:
                result = await remover.remove(tmp_path)
        except Exception as fallback_err:  # noqa: BLE001
            raise RemovalFailure(f"Background removal failed: {fallback_err}") from fallback_err

    if result is None:
        raise EmptyResult("Background removal returned empty result.")
    return result
