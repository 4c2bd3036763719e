# services/files.py
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from glowfit.core.config import settings, utc_now
from glowfit.core.exceptions import StorageError
from glowfit.crud.fitness import crud_user_video
from glowfit.crud.user import crud_user
from glowfit.data.file_storage import LocalFileStorage, SweepResult, format_size

logger = logging.getLogger(__name__)


def _cleanup_result(result: SweepResult, dry_run: bool) -> Dict[str, Any]:
    return {
        "deleted_files": result.deleted_files,
        "freed_space": result.freed_space,
        "freed_space_formatted": format_size(result.freed_space),
        "dry_run": dry_run,
        "errors": result.errors,
    }


class FileManagementService:
    """Admin maintenance of the upload directory."""

    # =====================================================================
    # REPORT
    # =====================================================================

    def report(
        self, db: Session, storage: LocalFileStorage, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        stats = storage.stats()
        orphans = storage.sweep(crud_user_video.get_all_urls(db), dry_run=True)
        cutoff = (now or utc_now()) - timedelta(days=settings.FILE_RETENTION_DAYS)
        total_users = crud_user.count(db)
        total_videos = crud_user_video.count(db)
        return {
            "upload_stats": {
                "total_files": stats.total_files,
                "total_size": stats.total_size,
                "total_size_formatted": format_size(stats.total_size),
                "average_size": stats.average_size,
                "average_size_formatted": format_size(stats.average_size),
                "oldest_file": stats.oldest_file,
                "newest_file": stats.newest_file,
            },
            "orphan_files": orphans.deleted_files,
            "expired_files": len(crud_user_video.get_unlinked_before(db, cutoff=cutoff)),
            "total_users": total_users,
            "total_videos": total_videos,
            "average_files_per_user": round(total_videos / total_users, 2) if total_users else 0,
        }

    # =====================================================================
    # CLEANUP
    # =====================================================================

    def cleanup_orphans(
        self, db: Session, storage: LocalFileStorage, dry_run: bool = False
    ) -> Dict[str, Any]:
        """Remove files under the video directory that no video record points to."""
        result = storage.sweep(crud_user_video.get_all_urls(db), dry_run=dry_run)
        logger.info(
            f"Orphan cleanup (dry_run={dry_run}): {result.deleted_files} files, "
            f"{format_size(result.freed_space)}"
        )
        return _cleanup_result(result, dry_run)

    def cleanup_expired(
        self,
        db: Session,
        storage: LocalFileStorage,
        max_age_days: Optional[int] = None,
        dry_run: bool = False,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Remove videos older than the retention period together with their
        files. Videos still used by a fitness item are kept.
        """
        days = max_age_days or settings.FILE_RETENTION_DAYS
        cutoff = (now or utc_now()) - timedelta(days=days)
        result = SweepResult()

        for video in crud_user_video.get_unlinked_before(db, cutoff=cutoff):
            result.deleted_files += 1
            result.freed_space += video.size
            if dry_run:
                continue
            url = video.url
            crud_user_video.remove(db, db_obj=video)
            try:
                storage.delete(url)
            except StorageError as e:
                result.errors.append(f"{url}: {e.message}")

        logger.info(
            f"Expired video cleanup (dry_run={dry_run}, older than {days} days): "
            f"{result.deleted_files} videos"
        )
        return _cleanup_result(result, dry_run)


file_management_service = FileManagementService()
