"""Tests for LocalFileStore against a temporary directory."""

import io

import pytest

from accounts.infrastructure.exceptions import (
    StorageNotFoundError,
    StoragePermissionError,
    StorageQuotaExceededError,
    StorageUploadError,
)
from accounts.infrastructure.external.storage import LocalFileStore


@pytest.fixture
def store(tmp_path) -> LocalFileStore:
    return LocalFileStore(str(tmp_path / "pictures"), max_size=1024)


async def test_store_then_load_and_stream(store):
    reference = await store.store(io.BytesIO(b"\x89PNG data"), "me.png", "image/png")
    assert reference.endswith("_me.png")
    assert await store.exists(reference)

    stored = await store.load(reference)
    assert stored.content_type == "image/png"
    assert stored.size == len(b"\x89PNG data")
    content = b"".join([chunk async for chunk in store.stream(reference)])
    assert content == b"\x89PNG data"


async def test_each_store_gets_a_new_reference(store):
    first = await store.store(io.BytesIO(b"a"), "me.png", "image/png")
    second = await store.store(io.BytesIO(b"b"), "me.png", "image/png")
    assert first != second


async def test_filename_path_components_are_stripped(store, tmp_path):
    reference = await store.store(io.BytesIO(b"a"), "../../etc/passwd", "image/png")
    assert "/" not in reference
    assert reference.endswith("_passwd")
    assert (tmp_path / "pictures" / reference).is_file()


async def test_unusable_filename_rejected(store):
    with pytest.raises(StorageUploadError):
        await store.store(io.BytesIO(b"a"), "..", "image/png")


async def test_quota(store):
    with pytest.raises(StorageQuotaExceededError):
        await store.store(io.BytesIO(b"x" * 2048), "big.png", "image/png")


async def test_delete(store):
    reference = await store.store(io.BytesIO(b"a"), "me.png", "image/png")
    assert await store.delete(reference) is True
    assert not await store.exists(reference)
    assert await store.delete(reference) is False


async def test_load_missing(store):
    with pytest.raises(StorageNotFoundError):
        await store.load("nothing.png")


async def test_traversal_reference_rejected(store):
    with pytest.raises(StoragePermissionError):
        await store.load("../outside.png")
    assert not await store.exists("../outside.png")
