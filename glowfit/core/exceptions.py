import logging
from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ---------------------------
# Service (Business logic)
# ---------------------------

class BusinessError(Exception):
    """Base class for all business logic errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "请求失败"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ServiceError(BusinessError):
    """Generic error for unexpected service failures."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "服务器内部错误"


class StorageError(ServiceError):
    """Raised when the file store cannot write or the upload cannot be recorded."""
    default_message = "文件保存失败，请重试"


class NotFoundError(BusinessError):
    """Raised when a resource does not exist or is not owned by the caller."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "资源不存在"


class ConflictError(BusinessError):
    """Raised on duplicate names, blocked deletes or foreign ids the caller does not own."""
    default_message = "资源冲突"


class InvalidStateError(BusinessError):
    """Raised when an action is not allowed in the entity's current status."""
    default_message = "当前状态不允许该操作"


class ValidationError(BusinessError):
    """Raised when business rule validation fails (e.g., invalid input)."""
    default_message = "数据验证失败"


class FileTooLargeError(ValidationError):
    """Raised by the file store when an upload exceeds its byte limit."""
    default_message = "文件过大"


class PermissionDeniedError(BusinessError):
    """Raised when a user does not have permission to perform an action."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "权限不足"


class UnauthorizedError(BusinessError):
    """Raised when authentication fails."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "未授权访问"


# ---------------------------
# Envelope helpers
# ---------------------------

def error_response(status_code: int, message: str, details: Optional[list] = None) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    details = []
    for err in exc.errors():
        # drop the "body"/"query"/"path" prefix from the location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        details.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return details


# ---------------------------
# FastAPI Exception Handlers
# ---------------------------

def register_exception_handlers(app):
    @app.exception_handler(BusinessError)
    async def business_error_handler(request: Request, exc: BusinessError):
        if exc.status_code >= 500:
            logger.error(f"Service error: {exc}", exc_info=exc)
        return error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            ValidationError.default_message,
            _field_errors(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, ServiceError.default_message
        )
