"""FileVerifier 测试"""

import pytest

from mcfetch.download import FileVerifier

from .conftest import sha1_of


@pytest.mark.asyncio
async def test_missing_file_is_invalid(tmp_path):
    assert await FileVerifier.is_valid(str(tmp_path / "nope")) is False
    assert await FileVerifier.is_valid(str(tmp_path / "nope"), "abc") is False


@pytest.mark.asyncio
async def test_existing_file_without_digest_is_valid(tmp_path):
    path = tmp_path / "a.bin"
    path.write_bytes(b"anything")
    assert await FileVerifier.is_valid(str(path)) is True


@pytest.mark.asyncio
async def test_digest_compare_is_case_insensitive(tmp_path):
    path = tmp_path / "a.bin"
    path.write_bytes(b"hello")
    digest = sha1_of(b"hello")

    assert await FileVerifier.calc_sha1(str(path)) == digest
    assert await FileVerifier.is_valid(str(path), digest.upper()) is True
    assert await FileVerifier.is_valid(str(path), sha1_of(b"other")) is False


@pytest.mark.asyncio
async def test_directory_is_not_a_valid_file(tmp_path):
    assert await FileVerifier.is_valid(str(tmp_path)) is False
    assert await FileVerifier.calc_sha1(str(tmp_path)) is None


@pytest.mark.asyncio
async def test_unreadable_file_is_invalid(tmp_path, monkeypatch):
    path = tmp_path / "locked.bin"
    path.write_bytes(b"secret")

    def deny(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr("mcfetch.download.verifier.aiofiles.open", deny)

    assert await FileVerifier.calc_sha1(str(path)) is None
    assert await FileVerifier.is_valid(str(path), sha1_of(b"secret")) is False
