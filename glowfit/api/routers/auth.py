# glowfit/api/routers/auth.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.core.config import get_db, settings
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from glowfit.services.user import user_service

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# =====================================================================
# PUBLIC ENDPOINTS - No authentication required
# =====================================================================

@router.post(
    "/register",
    response_model=ApiResponse[UserOut],
    status_code=status.HTTP_201_CREATED,
    summary="Register new user account",
)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new USER account.

    - **email**: Valid e-mail address, must not be registered yet
    - **password**: At least 6 characters
    - **name**: Optional display name
    """
    user = user_service.register(db, data)
    return ok(user, "注册成功")


@router.post("/login", response_model=ApiResponse[TokenResponse], summary="Login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    """
    Authenticate and open a session.

    The access token is returned in the body and also set as an HttpOnly
    session cookie, so browser clients need not handle it.
    """
    token = user_service.login(db, data)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return ok(token, "登录成功")


@router.post("/logout", response_model=ApiResponse[None], summary="Logout")
def logout(response: Response):
    """Clear the session cookie."""
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return ok(message="已退出登录")


@router.post("/forgot-password", response_model=ApiResponse[None], summary="Request password reset")
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """Always answers the same way, whether or not the e-mail is registered."""
    user_service.forgot_password(db, data.email)
    return ok(message="如果该邮箱已注册，您将收到重置密码的邮件")


# =====================================================================
# AUTHENTICATED ENDPOINTS
# =====================================================================

@router.get("/me", response_model=ApiResponse[UserOut], summary="Get current user")
def get_me(current_user: User = Depends(get_current_user)):
    return ok(current_user)
