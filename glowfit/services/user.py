# services/user.py
import logging
from typing import List, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from glowfit.core.config import settings
from glowfit.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    UnauthorizedError,
    ValidationError,
)
from glowfit.core.security import create_access_token, create_reset_token
from glowfit.crud.user import crud_user
from glowfit.models.enums import UserRole, UserStatus
from glowfit.models.user import User
from glowfit.schemas.common import PaginationParams
from glowfit.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for accounts and sessions."""

    def __init__(self):
        self.crud = crud_user

    # =====================================================================
    # REGISTRATION & LOGIN
    # =====================================================================

    def register(self, db: Session, data: RegisterRequest) -> User:
        """
        Public registration; always creates a USER account.

        Raises:
            ConflictError: If the e-mail is already registered
        """
        if self.crud.get_by_email(db, email=data.email):
            raise ConflictError("该邮箱已被注册")

        user = self.crud.create(db, email=data.email, password=data.password, name=data.name)
        logger.info(f"Registered user {user.id}")
        return user

    def login(self, db: Session, data: LoginRequest) -> TokenResponse:
        """
        Check credentials and issue an access token.

        Raises:
            UnauthorizedError: On unknown e-mail or wrong password
            PermissionDeniedError: If the account is not active
        """
        user = self.crud.get_by_email(db, email=data.email)
        if not user or not self.crud.verify_password(data.password, user.password_hash):
            raise UnauthorizedError("邮箱或密码错误")

        if user.status != UserStatus.ACTIVE:
            raise PermissionDeniedError("账户已被停用")

        user = self.crud.update_last_login(db, db_obj=user)
        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return TokenResponse(access_token=token, user=UserOut.model_validate(user))

    # =====================================================================
    # PASSWORD MANAGEMENT
    # =====================================================================

    def change_password(self, db: Session, user: User, data: ChangePasswordRequest) -> User:
        """
        Raises:
            ValidationError: If the current password is wrong or unchanged
        """
        if not self.crud.verify_password(data.current_password, user.password_hash):
            raise ValidationError("当前密码不正确")
        if data.current_password == data.new_password:
            raise ValidationError("新密码不能与当前密码相同")

        return self.crud.update_password(db, db_obj=user, new_password=data.new_password)

    def forgot_password(self, db: Session, email: str) -> None:
        """Issue a reset token if the account exists. Never reveals whether it does."""
        user = self.crud.get_by_email(db, email=email)
        if user is None:
            logger.info("Password reset requested for unknown e-mail")
            return

        token = create_reset_token(user.id)
        # no mail transport; the token is only logged
        logger.info(f"Password reset token for user {user.id}: {token}")

    # =====================================================================
    # ADMIN OPERATIONS
    # =====================================================================

    def create_admin(self, db: Session) -> User:
        """
        Bootstrap the first ADMIN from the configured credentials.

        Raises:
            ConflictError: If an admin (or the configured e-mail) already exists
        """
        if self.crud.get_first_admin(db):
            raise ConflictError("管理员账户已存在")
        if self.crud.get_by_email(db, email=settings.ADMIN_EMAIL):
            raise ConflictError("该邮箱已被注册")

        admin = self.crud.create(
            db,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            name=settings.ADMIN_NAME,
            role=UserRole.ADMIN,
        )
        logger.info(f"Created admin account {admin.id}")
        return admin

    def list_users(self, db: Session, params: PaginationParams) -> Tuple[List[User], int]:
        return self.crud.get_multi(db, params=params)

    def update_status(
        self, db: Session, admin: User, user_id: UUID, status: UserStatus
    ) -> User:
        """
        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If an admin tries to deactivate their own account
        """
        user = self.crud.get(db, id=user_id)
        if not user:
            raise NotFoundError("用户不存在")
        if user.id == admin.id and status != UserStatus.ACTIVE:
            raise ValidationError("不能停用自己的账户")

        return self.crud.update_status(db, db_obj=user, status=status)


user_service = UserService()
