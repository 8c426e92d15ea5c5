from io import BytesIO
from types import SimpleNamespace

import pytest

from quickai_service.errors import UnsupportedResultShape
from quickai_service.results import (
    ByteStream,
    BytesWrapper,
    RawBytes,
    classify_result,
    normalize_result,
)


class AsyncReader:
    def __init__(self, data: bytes):
        self._data = data

    async def read(self) -> bytes:
        return self._data


class ReaderWithData:
    """Satisfies both the stream and the wrapper shapes."""

    data = b"from-data"

    def read(self) -> bytes:
        return b"from-read"


async def test_raw_bytes_pass_through():
    assert await normalize_result(b"png") == b"png"


async def test_bytearray_and_memoryview_become_bytes():
    assert await normalize_result(bytearray(b"png")) == b"png"
    assert await normalize_result(memoryview(b"png")) == b"png"


async def test_sync_reader():
    assert await normalize_result(BytesIO(b"streamed")) == b"streamed"


async def test_async_reader_is_awaited():
    assert await normalize_result(AsyncReader(b"async-bytes")) == b"async-bytes"


async def test_data_wrapper_extracted_unchanged():
    assert await normalize_result(SimpleNamespace(data=b"wrapped")) == b"wrapped"


async def test_data_mapping_extracted_unchanged():
    assert classify_result({"data": b"wrapped"}) == BytesWrapper(b"wrapped")
    assert await normalize_result({"data": bytearray(b"wrapped")}) == b"wrapped"


async def test_mapping_without_bytes_data_is_unsupported():
    with pytest.raises(UnsupportedResultShape, match="dict"):
        await normalize_result({"data": "not bytes"})


async def test_read_takes_precedence_over_data():
    assert isinstance(classify_result(ReaderWithData()), ByteStream)
    assert await normalize_result(ReaderWithData()) == b"from-read"


def test_classify_shapes():
    assert classify_result(b"x") == RawBytes(b"x")
    assert classify_result(SimpleNamespace(data=b"x")) == BytesWrapper(b"x")


@pytest.mark.parametrize(
    "result",
    ["a string", 42, SimpleNamespace(data="not bytes"), SimpleNamespace(read="not callable")],
)
async def test_unsupported_shapes(result):
    with pytest.raises(UnsupportedResultShape):
        await normalize_result(result)


async def test_reader_returning_non_bytes():
    with pytest.raises(UnsupportedResultShape, match="read\\(\\) returned str"):
        await normalize_result(AsyncReader("text"))
