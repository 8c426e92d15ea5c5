"""
High-level background-removal pipeline.

`remove_background` is the main entry point used by both the HTTP API and the
local test script. It keeps orchestration simple:
imageUrl in -> raw bytes -> removal (with file fallback) -> PNG data URL out.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

import requests

from .inputs import load_image_bytes
from .remover import BackgroundRemover, invoke_removal
from .results import normalize_result

logger = logging.getLogger(__name__)

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def to_png_data_url(data: bytes) -> str:
    return PNG_DATA_URL_PREFIX + base64.b64encode(data).decode("ascii")


async def remove_background(
    image_url: Any,
    remover: BackgroundRemover,
    session: requests.Session,
    temp_prefix: str = "bg-rem-",
    fetch_timeout: Optional[float] = None,
) -> str:
    """
    Full pipeline from a caller-supplied ``imageUrl`` to a PNG data URL.

    Raises:
        ImageInputError: any resolution, removal or normalization failure.
    """
    image_bytes = await load_image_bytes(image_url, session, timeout=fetch_timeout)
    logger.info("Resolved input image (%d bytes)", len(image_bytes))

    result = await invoke_removal(remover, image_bytes, temp_prefix=temp_prefix)
    png_bytes = await normalize_result(result)
    return to_png_data_url(png_bytes)
