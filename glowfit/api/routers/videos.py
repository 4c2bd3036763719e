# glowfit/api/routers/videos.py
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok, paged, pagination
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.data.file_storage import LocalFileStorage, get_file_storage
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse, Page, PaginationParams
from glowfit.schemas.fitness import UserVideoDetail, UserVideoOut
from glowfit.services.video import video_service

router = APIRouter(prefix="/api", tags=["Videos"])


@router.post(
    "/upload/video",
    response_model=ApiResponse[UserVideoOut],
    status_code=status.HTTP_201_CREATED,
    summary="Upload a video",
)
def upload_video(
    video: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    storage: LocalFileStorage = Depends(get_file_storage),
    db: Session = Depends(get_db),
):
    """
    Upload an instructional video as `multipart/form-data` field **video**.

    Accepted types: MP4, WebM, AVI, MOV, WMV; at most 300 MB. Type and
    declared size are checked before the body is read; the body is then
    streamed to disk with the size limit enforced on the bytes written.
    """
    uploaded = video_service.upload(
        db,
        storage,
        current_user,
        source=video.file,
        original_name=video.filename or "video",
        content_type=video.content_type or "",
        size=video.size,
    )
    return ok(uploaded, "视频上传成功")


@router.get("/videos", response_model=ApiResponse[Page[UserVideoOut]], summary="List my videos")
def list_videos(
    params: PaginationParams = Depends(pagination(20)),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    videos, total = video_service.list_videos(db, current_user, params)
    return paged(videos, params, total)


@router.get("/videos/{video_id}", response_model=ApiResponse[UserVideoDetail], summary="Get a video")
def get_video(
    video_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ok(video_service.get_video(db, current_user, video_id))


@router.delete("/videos/{video_id}", response_model=ApiResponse[None], summary="Delete a video")
def delete_video(
    video_id: UUID,
    current_user: User = Depends(get_current_user),
    storage: LocalFileStorage = Depends(get_file_storage),
    db: Session = Depends(get_db),
):
    """Refused while a fitness item uses the video; removes the stored file too."""
    video_service.delete_video(db, storage, current_user, video_id)
    return ok(message="视频删除成功")
