# glowfit/api/routers/admin.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok, paged, pagination
from glowfit.api.export import export_response
from glowfit.core.config import get_db
from glowfit.core.security import get_current_admin_user
from glowfit.data.file_storage import LocalFileStorage, get_file_storage
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse, Page, PaginationParams
from glowfit.schemas.files import (
    ExpiredCleanupRequest,
    FileCleanupResult,
    FileReport,
    OrphanCleanupRequest,
)
from glowfit.schemas.notification import CleanupResult
from glowfit.schemas.reminder import DispatchResult
from glowfit.schemas.user import UserAdminOut, UserOut, UserStatusUpdate
from glowfit.services.dashboard import ExportFormat, dashboard_service
from glowfit.services.files import file_management_service
from glowfit.services.reminder import cleanup_notifications, dispatch_due_reminders
from glowfit.services.user import user_service

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# =====================================================================
# SETUP - No authentication required
# =====================================================================

@router.post(
    "/create-admin",
    response_model=ApiResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
    summary="Create the initial admin account (one-time setup)",
)
def create_admin(db: Session = Depends(get_db)):
    """
    Create the first ADMIN from the configured ADMIN_EMAIL / ADMIN_PASSWORD.

    Only works while no admin account exists.
    """
    return ok(user_service.create_admin(db), "管理员账户创建成功")


# =====================================================================
# ADMIN ENDPOINTS - Admin role required
# =====================================================================

@router.get("/users", response_model=ApiResponse[Page[UserAdminOut]], summary="List users")
def list_users(
    params: PaginationParams = Depends(pagination(20)),
    admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    users, total = user_service.list_users(db, params)
    return paged(users, params, total)


@router.put("/users/{user_id}/status", response_model=ApiResponse[UserOut], summary="Change account status")
def update_user_status(
    user_id: UUID,
    data: UserStatusUpdate,
    admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """Suspended or inactive accounts can no longer sign in or use their session."""
    user = user_service.update_status(db, admin, user_id, data.status)
    return ok(user, "用户状态更新成功")


@router.get("/export", summary="Export data of all users")
def export_data(
    type: str = Query("users"),
    format: ExportFormat = Query(ExportFormat.json),
    admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """Types: users, glow-plans, fitness-items, notifications."""
    rows, columns = dashboard_service.export_admin_data(db, type)
    return export_response(rows, columns, type, format)


@router.post("/reminders/dispatch", response_model=ApiResponse[DispatchResult], summary="Send due reminders")
def dispatch_reminders(
    admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    """
    Turn every due reminder into a notification and schedule its next run.

    Meant to be called periodically by an external scheduler.
    """
    return ok(dispatch_due_reminders(db))


@router.post(
    "/notifications/cleanup",
    response_model=ApiResponse[CleanupResult],
    summary="Delete old read notifications",
)
def cleanup(
    admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db),
):
    return ok(cleanup_notifications(db))


# =====================================================================
# FILE MANAGEMENT
# =====================================================================

@router.get("/files", response_model=ApiResponse[FileReport], summary="Upload directory report")
def file_report(
    admin: User = Depends(get_current_admin_user),
    storage: LocalFileStorage = Depends(get_file_storage),
    db: Session = Depends(get_db),
):
    """Disk usage of uploaded videos plus how many files a cleanup would remove."""
    return ok(file_management_service.report(db, storage))


@router.post(
    "/files/cleanup-orphans",
    response_model=ApiResponse[FileCleanupResult],
    summary="Delete files without a video record",
)
def cleanup_orphan_files(
    data: Optional[OrphanCleanupRequest] = None,
    admin: User = Depends(get_current_admin_user),
    storage: LocalFileStorage = Depends(get_file_storage),
    db: Session = Depends(get_db),
):
    """Set **dryRun** to only report what would be deleted."""
    result = file_management_service.cleanup_orphans(
        db, storage, dry_run=data.dry_run if data else False
    )
    return ok(
        result,
        f"清理完成：删除 {result['deleted_files']} 个孤儿文件，释放 {result['freed_space_formatted']} 空间",
    )


@router.post(
    "/files/cleanup-expired",
    response_model=ApiResponse[FileCleanupResult],
    summary="Delete old unused videos",
)
def cleanup_expired_files(
    data: Optional[ExpiredCleanupRequest] = None,
    admin: User = Depends(get_current_admin_user),
    storage: LocalFileStorage = Depends(get_file_storage),
    db: Session = Depends(get_db),
):
    """
    Delete videos older than **maxAge** days (default FILE_RETENTION_DAYS)
    that no fitness item uses, with their files.
    """
    data = data or ExpiredCleanupRequest()
    result = file_management_service.cleanup_expired(
        db, storage, max_age_days=data.max_age, dry_run=data.dry_run
    )
    return ok(
        result,
        f"清理完成：删除 {result['deleted_files']} 个过期文件，释放 {result['freed_space_formatted']} 空间",
    )
