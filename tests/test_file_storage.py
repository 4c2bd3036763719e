"""Local file store."""

import io
import uuid

import pytest

from glowfit.core.exceptions import FileTooLargeError, StorageError
from glowfit.data.file_storage import FileMetadata, LocalFileStorage, format_size


@pytest.fixture
def store(tmp_path):
    return LocalFileStorage(str(tmp_path), "/uploads/")


def _meta(name="clip.mp4", user_id=None):
    return FileMetadata(user_id or uuid.uuid4(), name, "video/mp4")


def test_store_and_delete(store, tmp_path):
    user_id = uuid.uuid4()
    stored = store.store(io.BytesIO(b"abc"), _meta("../../evil name.mov", user_id))

    assert stored.url.startswith("/uploads/videos/")
    assert f"/{user_id}/evilname-" in stored.url
    assert stored.size == 3
    assert store.path_for_url(stored.url).read_bytes() == b"abc"
    assert str(tmp_path) in stored.path

    store.delete(stored.url)
    assert not store.exists(stored.url)
    # deleting twice is not an error
    store.delete(stored.url)


def test_size_limit_enforced_while_streaming(store, tmp_path):
    with pytest.raises(FileTooLargeError):
        store.store(io.BytesIO(b"x" * 5000), _meta(), max_size=4096)

    assert [p for p in tmp_path.rglob("*") if p.is_file()] == []


def test_file_at_the_limit_is_kept(store):
    stored = store.store(io.BytesIO(b"x" * 4096), _meta(), max_size=4096)
    assert stored.size == 4096


@pytest.mark.parametrize("url", ["/elsewhere/a.mp4", "/uploads/../../etc/passwd"])
def test_rejects_foreign_urls(store, url):
    with pytest.raises(StorageError):
        store.delete(url)


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0B"),
        (512, "512B"),
        (1024, "1KB"),
        (1536, "1.5KB"),
        (300 * 1024 * 1024, "300MB"),
        (int(2.5 * 1024 ** 3), "2.5GB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


class TestMaintenance:
    def test_stats(self, store):
        store.store(io.BytesIO(b"a" * 10), _meta())
        store.store(io.BytesIO(b"b" * 30), _meta())

        stats = store.stats()
        assert (stats.total_files, stats.total_size, stats.average_size) == (2, 40, 20)
        assert stats.oldest_file <= stats.newest_file

    def test_stats_of_missing_directory(self, store):
        stats = store.stats()
        assert stats.total_files == 0
        assert stats.oldest_file is None

    def test_sweep_keeps_known_files_and_prunes_empty_dirs(self, store, tmp_path):
        kept = store.store(io.BytesIO(b"keep"), _meta())
        orphan = store.store(io.BytesIO(b"orphan!"), _meta())
        orphan_dir = store.path_for_url(orphan.url).parent

        preview = store.sweep({kept.url}, dry_run=True)
        assert (preview.deleted_files, preview.freed_space) == (1, 7)
        assert store.exists(orphan.url)

        result = store.sweep({kept.url})
        assert (result.deleted_files, result.freed_space, result.errors) == (1, 7, [])
        assert store.exists(kept.url)
        assert not store.exists(orphan.url)
        assert not orphan_dir.exists()
