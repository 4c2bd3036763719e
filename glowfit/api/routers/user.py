# glowfit/api/routers/user.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.schemas.user import ChangePasswordRequest
from glowfit.services.user import user_service

router = APIRouter(prefix="/api/user", tags=["User"])


@router.put("/change-password", response_model=ApiResponse[None], summary="Change my password")
def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Change the password of the authenticated user.

    - **currentPassword**: Must match the stored password
    - **newPassword**: At least 8 characters with upper and lower case
      letters, a digit and a special character; must differ from the current one
    """
    user_service.change_password(db, current_user, data)
    return ok(message="密码修改成功")
