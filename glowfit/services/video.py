# services/video.py
import logging
from typing import BinaryIO, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from glowfit.core.config import settings
from glowfit.core.exceptions import (
    ConflictError,
    FileTooLargeError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from glowfit.crud.fitness import crud_user_video
from glowfit.data.file_storage import FileMetadata, LocalFileStorage, format_size
from glowfit.models.fitness import UserVideo
from glowfit.models.user import User
from glowfit.schemas.common import PaginationParams

logger = logging.getLogger(__name__)

ALLOWED_VIDEO_TYPES = {
    "video/mp4",
    "video/webm",
    "video/avi",
    "video/mov",
    "video/wmv",
}
EMPTY_UPLOAD = "请选择要上传的视频文件"


def too_large_message() -> str:
    return f"视频文件过大，最大支持 {format_size(settings.MAX_VIDEO_SIZE)}"


class VideoService:
    """Uploaded instructional videos."""

    # =====================================================================
    # UPLOAD
    # =====================================================================

    def validate_upload(self, content_type: str, size: Optional[int]) -> None:
        """
        Checks that run before any byte of the body is read. `size` is the
        declared size, None when the client did not send one.

        Raises:
            ValidationError: On an empty file, unsupported type or oversize
        """
        if size == 0:
            raise ValidationError(EMPTY_UPLOAD)
        if content_type not in ALLOWED_VIDEO_TYPES:
            raise ValidationError("不支持的视频格式，仅支持 MP4、WebM、AVI、MOV、WMV")
        if size is not None and size > settings.MAX_VIDEO_SIZE:
            raise ValidationError(too_large_message())

    def upload(
        self,
        db: Session,
        storage: LocalFileStorage,
        user: User,
        *,
        source: BinaryIO,
        original_name: str,
        content_type: str,
        size: Optional[int] = None,
    ) -> UserVideo:
        """
        Stream the file into the store, then record it.

        If the row cannot be written the stored file is removed again, so a
        failed upload leaves neither a row nor an orphan file.

        Raises:
            ValidationError: If the upload is rejected
            StorageError: If the file or its record cannot be saved
        """
        self.validate_upload(content_type, size)

        try:
            stored = storage.store(
                source,
                FileMetadata(user_id=user.id, original_name=original_name, mime_type=content_type),
                max_size=settings.MAX_VIDEO_SIZE,
            )
        except FileTooLargeError:
            raise ValidationError(too_large_message())
        if stored.size == 0:
            storage.delete(stored.url)
            raise ValidationError(EMPTY_UPLOAD)

        try:
            return crud_user_video.create(
                db,
                user_id=user.id,
                filename=stored.filename,
                original_name=original_name,
                mime_type=content_type,
                size=stored.size,
                path=stored.path,
                url=stored.url,
            )
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Recording upload {stored.url} failed, removing file: {e}")
            try:
                storage.delete(stored.url)
            except StorageError:
                logger.exception(f"Could not remove orphan file {stored.url}")
            raise StorageError()

    # =====================================================================
    # READ / DELETE
    # =====================================================================

    def list_videos(
        self, db: Session, user: User, params: PaginationParams
    ) -> Tuple[List[UserVideo], int]:
        return crud_user_video.get_multi_by_user(db, user_id=user.id, params=params)

    def get_video(self, db: Session, user: User, video_id: UUID) -> UserVideo:
        video = crud_user_video.get_owned(db, id=video_id, user_id=user.id)
        if not video:
            raise NotFoundError("视频不存在")
        return video

    def delete_video(
        self, db: Session, storage: LocalFileStorage, user: User, video_id: UUID
    ) -> None:
        """
        Delete the record, then the file. A file that cannot be removed is
        only logged, the record is already gone.

        Raises:
            ConflictError: If a fitness item still uses the video
        """
        video = self.get_video(db, user, video_id)
        if crud_user_video.count_item_links(db, video_id=video.id) > 0:
            raise ConflictError("该视频正在被运动条目使用，无法删除")

        url = video.url
        crud_user_video.remove(db, db_obj=video)

        try:
            storage.delete(url)
        except StorageError:
            logger.warning(f"Video {video_id} deleted but file {url} could not be removed")


video_service = VideoService()
