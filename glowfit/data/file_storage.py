"""
Local-disk implementation of the file store used for uploaded videos.

The store is addressed only through public URLs: `store` returns the URL
under which the file is served, and `delete` takes that URL back. The
maintenance helpers (`stats`, `sweep`) walk one category directory and are
used by the admin file-management endpoints.
"""

import logging
import os
import shutil
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Set
from uuid import UUID

from glowfit.core.config import settings, utc_now
from glowfit.core.exceptions import FileTooLargeError, StorageError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def format_size(size: float) -> str:
    """Human-readable byte count: 512B, 1.5KB, 300MB."""
    for unit, factor in (("GB", 1024 ** 3), ("MB", 1024 ** 2), ("KB", 1024)):
        if size >= factor:
            return f"{size / factor:.1f}".rstrip("0").rstrip(".") + unit
    return f"{int(size)}B"


@dataclass
class FileMetadata:
    """What the store needs to know to place a file."""
    user_id: UUID
    original_name: str
    mime_type: str
    category: str = "videos"


@dataclass
class StoredFile:
    filename: str
    path: str
    url: str
    size: int


@dataclass
class DirectoryStats:
    total_files: int = 0
    total_size: int = 0
    oldest_file: Optional[datetime] = None
    newest_file: Optional[datetime] = None

    @property
    def average_size(self) -> int:
        return self.total_size // self.total_files if self.total_files else 0


@dataclass
class SweepResult:
    deleted_files: int = 0
    freed_space: int = 0
    errors: List[str] = field(default_factory=list)


class _LimitedReader:
    """Read-only wrapper that fails once more than `limit` bytes came through."""

    def __init__(self, source: BinaryIO, limit: int):
        self.source = source
        self.remaining = limit

    def read(self, size: int = -1) -> bytes:
        chunk = self.source.read(size)
        self.remaining -= len(chunk)
        if self.remaining < 0:
            raise FileTooLargeError()
        return chunk


class LocalFileStorage:
    """Writes files below a root directory and serves them under a URL prefix."""

    def __init__(self, root: str, url_prefix: str):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _relative_path(self, metadata: FileMetadata, now: Optional[datetime] = None) -> Path:
        now = now or utc_now()
        stem, ext = os.path.splitext(os.path.basename(metadata.original_name))
        stem = "".join(c for c in stem if c.isalnum() or c in "-_")[:50] or "file"
        filename = f"{stem}-{uuid.uuid4().hex}{ext.lower()}"
        return (
            Path(metadata.category)
            / f"{now.year:04d}"
            / f"{now.month:02d}"
            / str(metadata.user_id)
            / filename
        )

    def _url_for(self, target: Path) -> str:
        return f"{self.url_prefix}/{target.relative_to(self.root).as_posix()}"

    def _discard(self, target: Path) -> None:
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to remove partial file {target}: {e}")

    def store(
        self, source: BinaryIO, metadata: FileMetadata, max_size: Optional[int] = None
    ) -> StoredFile:
        """
        Stream `source` to disk in chunks and return where it lives.

        Raises:
            FileTooLargeError: If more than `max_size` bytes arrive; nothing is kept
            StorageError: If the file cannot be written
        """
        relative = self._relative_path(metadata)
        target = self.root / relative
        reader = _LimitedReader(source, max_size) if max_size is not None else source
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as out:
                shutil.copyfileobj(reader, out, CHUNK_SIZE)
        except FileTooLargeError:
            self._discard(target)
            raise
        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            self._discard(target)
            raise StorageError()

        return StoredFile(
            filename=relative.name,
            path=str(target),
            url=f"{self.url_prefix}/{relative.as_posix()}",
            size=target.stat().st_size,
        )

    def path_for_url(self, url: str) -> Path:
        if not url.startswith(self.url_prefix + "/"):
            raise StorageError(f"Unknown file URL: {url}")
        relative = url[len(self.url_prefix) + 1:]
        target = (self.root / relative).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Unknown file URL: {url}")
        return target

    def delete(self, url: str) -> None:
        """Remove a stored file. Deleting a missing file is not an error."""
        target = self.path_for_url(url)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning(f"File already gone: {target}")
        except OSError as e:
            logger.error(f"Failed to delete {target}: {e}")
            raise StorageError("文件删除失败")

    def exists(self, url: str) -> bool:
        return self.path_for_url(url).exists()

    # =====================================================================
    # MAINTENANCE
    # =====================================================================

    def _files(self, category: str) -> Iterator[Path]:
        base = self.root / category
        if not base.is_dir():
            return iter(())
        return (p for p in sorted(base.rglob("*")) if p.is_file())

    def stats(self, category: str = "videos") -> DirectoryStats:
        """File count, total size and modification-time range of one category."""
        result = DirectoryStats()
        for path in self._files(category):
            st = path.stat()
            modified = datetime.fromtimestamp(st.st_mtime, timezone.utc).replace(tzinfo=None)
            result.total_files += 1
            result.total_size += st.st_size
            if result.oldest_file is None or modified < result.oldest_file:
                result.oldest_file = modified
            if result.newest_file is None or modified > result.newest_file:
                result.newest_file = modified
        return result

    def sweep(
        self, keep_urls: Set[str], category: str = "videos", dry_run: bool = False
    ) -> SweepResult:
        """
        Delete every file of the category whose URL is not in `keep_urls`,
        then prune directories left empty. With `dry_run` nothing is touched
        and the result reports what would go.
        """
        result = SweepResult()
        for path in self._files(category):
            if self._url_for(path) in keep_urls:
                continue
            try:
                size = path.stat().st_size
                if not dry_run:
                    path.unlink()
            except OSError as e:
                result.errors.append(f"{path}: {e}")
                continue
            logger.info(f"{'Would delete' if dry_run else 'Deleted'} orphan file {path}")
            result.deleted_files += 1
            result.freed_space += size

        if not dry_run:
            self._prune_empty_dirs(self.root / category)
        return result

    def _prune_empty_dirs(self, base: Path) -> None:
        if not base.is_dir():
            return
        # deepest first so parents empty out before they are checked
        directories = sorted(
            (p for p in base.rglob("*") if p.is_dir()), key=lambda p: len(p.parts), reverse=True
        )
        for directory in directories:
            if any(directory.iterdir()):
                continue
            try:
                directory.rmdir()
            except OSError as e:
                logger.warning(f"Could not prune {directory}: {e}")


_storage = LocalFileStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)


def get_file_storage() -> LocalFileStorage:
    """File storage dependency."""
    return _storage
