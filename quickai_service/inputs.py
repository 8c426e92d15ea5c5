"""
Resolution of the caller-supplied ``imageUrl`` into raw image bytes.

Three forms are accepted:
 - inline ``data:`` URLs,
 - absolute ``http://`` / ``https://`` URLs,
 - anything else is treated as a local filesystem path.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Optional, Union

from fastapi.concurrency import run_in_threadpool
import requests

from .errors import InvalidInput, UpstreamFetchError

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"
REMOTE_PREFIXES = ("http://", "https://")
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


@dataclass(frozen=True)
class InlineData:
    payload: bytes
    mime_hint: str


@dataclass(frozen=True)
class RemoteUrl:
    url: str


@dataclass(frozen=True)
class LocalPath:
    path: Path


ImageInput = Union[InlineData, RemoteUrl, LocalPath]


def _decode_base64(text: str) -> bytes:
    # Accepts both alphabets, embedded whitespace and missing padding.
    cleaned = "".join(text.split()).translate(_URLSAFE_TO_STANDARD)
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned)
    except ValueError as exc:
        raise InvalidInput("Invalid data URL: payload is not valid base64") from exc


def parse_data_url(value: str) -> InlineData:
    """Split ``data:<mime>;base64,<payload>`` on the first comma and decode the payload."""
    header, sep, payload = value[len(DATA_URL_PREFIX) :].partition(",")
    if not sep or not payload:
        raise InvalidInput("Invalid data URL")
    mime_hint = header.split(";", 1)[0]
    return InlineData(payload=_decode_base64(payload), mime_hint=mime_hint)


def classify_input(value: Any) -> ImageInput:
    """Decide which of the three input forms ``value`` is."""
    if not isinstance(value, str):
        raise InvalidInput("imageUrl must be a string containing a remote URL or data URL.")
    if value.startswith(DATA_URL_PREFIX):
        return parse_data_url(value)
    if value.startswith(REMOTE_PREFIXES):
        return RemoteUrl(url=value)
    return LocalPath(path=Path(value))


def _fetch_remote(url: str, session: requests.Session, timeout: Optional[float]) -> bytes:
    try:
        resp = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise UpstreamFetchError(f"Failed to fetch image URL: {exc}") from exc
    if not resp.ok:
        raise UpstreamFetchError(
            f"Failed to fetch image URL, status {resp.status_code}", status_code=resp.status_code
        )
    return resp.content


def _read_local(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise InvalidInput(f"Could not read image file {path}: {exc}") from exc


async def resolve_input(
    image_input: ImageInput,
    session: requests.Session,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Turn a classified input into bytes.

    Network and disk reads run in the threadpool. The result is guaranteed to
    be non-empty.

    Raises:
        InvalidInput: unreadable path or empty payload.
        UpstreamFetchError: the remote server answered with a non-2xx status
            or could not be reached.
    """
    if isinstance(image_input, InlineData):
        data = image_input.payload
    elif isinstance(image_input, RemoteUrl):
        logger.info("Fetching remote image url=%s", image_input.url)
        data = await run_in_threadpool(_fetch_remote, image_input.url, session, timeout)
    else:
        data = await run_in_threadpool(_read_local, image_input.path)

    if not data:
        raise InvalidInput("Image payload is empty")
    return data


async def load_image_bytes(
    value: Any,
    session: requests.Session,
    timeout: Optional[float] = None,
) -> bytes:
    return await resolve_input(classify_input(value), session, timeout)
