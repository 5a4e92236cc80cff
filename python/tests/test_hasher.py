"""
Hasher Tests - Verify content digests.

Tests:
- xxHash64 digest computation
- Duplicate detection
- Streaming matches in-memory digests
- Error handling for missing files
"""


import pytest
import xxhash

from coreindex.hasher import CHUNK_SIZE, Hasher, compute_digest


class TestComputeDigest:
    """Tests for the synchronous digest functions."""

    def test_digest_is_xxh64_hex(self, temp_dir):
        """Digest is the 16-char xxHash64 hex of the file bytes."""
        f = temp_dir / "core.rbf"
        f.write_bytes(b"core bits")

        digest = compute_digest(f)

        assert len(digest) == 16
        assert digest == xxhash.xxh64(b"core bits").hexdigest()

    def test_identical_content_same_digest(self, duplicate_files):
        """Files with identical content have the same digest."""
        file1, file2 = duplicate_files
        assert compute_digest(file1) == compute_digest(file2)

    def test_different_content_different_digest(self, temp_dir):
        a = temp_dir / "a.rbf"
        b = temp_dir / "b.rbf"
        a.write_bytes(b"first")
        b.write_bytes(b"second")

        assert compute_digest(a) != compute_digest(b)

    def test_empty_file_is_not_special(self, temp_dir):
        """An empty file digests like an empty buffer, not like its name."""
        empty = temp_dir / "empty.mra"
        empty.write_bytes(b"")
        full = temp_dir / "full.mra"
        full.write_bytes(b"<x/>")

        assert compute_digest(empty) == xxhash.xxh64(b"").hexdigest()
        assert compute_digest(full) != xxhash.xxh64(b"").hexdigest()

    def test_streams_large_file(self, temp_dir):
        """Files larger than one chunk hash the whole content."""
        data = bytes(range(256)) * (CHUNK_SIZE // 256 * 3 + 7)
        big = temp_dir / "big.rbf"
        big.write_bytes(data)

        assert compute_digest(big) == xxhash.xxh64(data).hexdigest()

    def test_missing_file_raises(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            compute_digest(temp_dir / "gone.rbf")


class TestHasher:
    """Tests for the thread-pool backed Hasher."""

    @pytest.mark.asyncio
    async def test_hash_file(self, duplicate_files, test_config):
        file1, file2 = duplicate_files

        hasher = Hasher(test_config)
        try:
            d1 = await hasher.hash_file(file1)
            d2 = await hasher.hash_file(file2)
        finally:
            hasher.close()

        assert d1 == d2 == compute_digest(file1)

    @pytest.mark.asyncio
    async def test_hash_deleted_file_raises(self, temp_dir, test_config):
        """Hasher surfaces read errors to the caller."""
        file = temp_dir / "temporary.rbf"
        file.write_bytes(b"Will be deleted")
        file.unlink()

        hasher = Hasher(test_config)
        try:
            with pytest.raises(OSError):
                await hasher.hash_file(file)
        finally:
            hasher.close()

    def test_close_is_idempotent(self, test_config):
        hasher = Hasher(test_config)
        hasher.close()
        hasher.close()
