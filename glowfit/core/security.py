# glowfit/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from glowfit.core.config import settings, get_db
from glowfit.core.exceptions import UnauthorizedError, PermissionDeniedError
from glowfit.crud.user import crud_user
from glowfit.models.user import User
from glowfit.models.enums import UserRole, UserStatus


# =====================================================================
# JWT TOKEN CONFIGURATION
# =====================================================================

# auto_error is off so the session cookie can stand in for the header.
security = HTTPBearer(auto_error=False)


# =====================================================================
# TOKEN CREATION
# =====================================================================

def create_access_token(data: dict) -> str:
    """
    Create JWT access token.

    Args:
        data: Dictionary containing user data (typically {"sub": user_id})

    Returns:
        Encoded JWT access token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_reset_token(user_id: UUID) -> str:
    """Short-lived token for the forgot-password flow."""
    expire = datetime.now(timezone.utc) + timedelta(hours=1)
    return jwt.encode(
        {"sub": str(user_id), "exp": expire, "type": "reset"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


# =====================================================================
# TOKEN VERIFICATION
# =====================================================================

def verify_access_token(token: str) -> UUID:
    """
    Verify an access token and return the user id it carries.

    Raises:
        UnauthorizedError: If the token is invalid, expired or of another type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("登录已过期，请重新登录")

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise UnauthorizedError()

    try:
        return UUID(user_id)
    except ValueError:
        raise UnauthorizedError()


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


# =====================================================================
# USER AUTHENTICATION DEPENDENCIES
# =====================================================================

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get current authenticated user from the session cookie or Bearer header.

    Raises:
        UnauthorizedError: If no valid token is present or the user is gone
        PermissionDeniedError: If the account is not active
    """
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError()

    user = crud_user.get(db, id=verify_access_token(token))
    if user is None:
        raise UnauthorizedError()

    if user.status != UserStatus.ACTIVE:
        raise PermissionDeniedError("账户已被停用")

    return user


async def get_current_admin_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Get current user with admin role.

    Raises:
        PermissionDeniedError: If user is not admin
    """
    if current_user.role != UserRole.ADMIN:
        raise PermissionDeniedError("需要管理员权限")
    return current_user
