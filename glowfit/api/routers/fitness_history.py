# glowfit/api/routers/fitness_history.py
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.services.fitness import fitness_service

router = APIRouter(prefix="/api/fitness-history", tags=["Fitness History"])


@router.delete("/{history_id}", response_model=ApiResponse[None], summary="Delete a workout")
def delete_history(
    history_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fitness_service.delete_history(db, current_user, history_id)
    return ok(message="记录删除成功")
