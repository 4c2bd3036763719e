# schemas/files.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from glowfit.schemas.common import CamelModel


class UploadStats(CamelModel):
    total_files: int
    total_size: int
    total_size_formatted: str
    average_size: int
    average_size_formatted: str
    oldest_file: Optional[datetime] = None
    newest_file: Optional[datetime] = None


class FileReport(CamelModel):
    upload_stats: UploadStats
    orphan_files: int
    expired_files: int
    total_users: int
    total_videos: int
    average_files_per_user: float


class OrphanCleanupRequest(CamelModel):
    dry_run: bool = False


class ExpiredCleanupRequest(CamelModel):
    dry_run: bool = False
    max_age: Optional[int] = Field(None, ge=1, le=3650, description="Days; defaults to FILE_RETENTION_DAYS")


class FileCleanupResult(CamelModel):
    deleted_files: int
    freed_space: int
    freed_space_formatted: str
    dry_run: bool
    errors: List[str] = []
