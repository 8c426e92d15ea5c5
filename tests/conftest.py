import base64
from io import BytesIO
from pathlib import Path
from typing import AsyncGenerator, List, Optional
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image

from quickai_service.api import create_app
from quickai_service.config import Settings
from quickai_service.remover import BackgroundRemover

TEST_TEMP_PREFIX = "quickai-test-"


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b""):
        self.status_code = status_code
        self.content = content

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Stands in for requests.Session when fetching remote images."""

    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None):
        self.response = response or FakeResponse(200, b"remote-bytes")
        self.exc = exc
        self.calls: List[tuple] = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        pass


class FakeRemover(BackgroundRemover):
    """
    Records every call. ``fail_on`` selects which input kinds raise:
    "bytes", "path" or both.
    """

    def __init__(self, result=b"cutout-png", fail_on=()):
        self.result = result
        self.fail_on = set(fail_on)
        self.calls: List[object] = []
        self.path_existed: List[bool] = []

    async def remove(self, source):
        self.calls.append(source)
        if isinstance(source, Path):
            self.path_existed.append(source.exists())
            if "path" in self.fail_on:
                raise RuntimeError("file-based removal exploded")
            return self.result
        if "bytes" in self.fail_on:
            raise RuntimeError("in-memory removal exploded")
        return self.result


@pytest.fixture
def png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_url(png_bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        temp_dir_prefix=TEST_TEMP_PREFIX,
        log_level="DEBUG",
    )


@pytest.fixture
def remover() -> FakeRemover:
    return FakeRemover()


@pytest.fixture
def http_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def completions() -> AsyncMock:
    client = AsyncMock()
    client.acomplete.return_value = "[]"
    return client


@pytest.fixture
def app(settings, remover, http_session, completions):
    return create_app(
        settings=settings,
        remover=remover,
        completions=completions,
        http_session=http_session,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with app.router.lifespan_context(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
