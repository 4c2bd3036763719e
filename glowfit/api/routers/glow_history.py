# glowfit/api/routers/glow_history.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.services.glow import glow_service

router = APIRouter(prefix="/api/glow-history", tags=["Glow History"])


@router.delete("/{history_id}", response_model=ApiResponse[None], summary="Delete a completion")
def delete_history(
    history_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    glow_service.delete_history(db, current_user, history_id)
    return ok(message="记录删除成功")
