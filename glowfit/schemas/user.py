# schemas/user.py
import re
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from glowfit.models.enums import UserRole, UserStatus
from glowfit.schemas.common import CamelModel

SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


# =====================================================================
# READ SCHEMAS
# =====================================================================

class UserOut(CamelModel):
    """Public view of an account. Never carries the password hash."""
    id: UUID
    email: EmailStr
    name: Optional[str] = None
    role: UserRole
    status: UserStatus
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserAdminOut(UserOut):
    """Admin listing view with ownership counts."""
    glow_plan_count: int = 0
    fitness_item_count: int = 0
    notification_count: int = 0


# =====================================================================
# AUTH SCHEMAS
# =====================================================================

class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not any(c.isupper() for c in v):
            raise ValueError("密码必须包含至少一个大写字母")
        if not any(c.islower() for c in v):
            raise ValueError("密码必须包含至少一个小写字母")
        if not any(c.isdigit() for c in v):
            raise ValueError("密码必须包含至少一个数字")
        if not SPECIAL_CHARACTERS.search(v):
            raise ValueError("密码必须包含至少一个特殊字符")
        return v


class UserStatusUpdate(CamelModel):
    """Restricted update - status change (admin only)."""
    status: UserStatus
