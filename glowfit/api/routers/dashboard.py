# glowfit/api/routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from glowfit.api.deps import ok
from glowfit.api.export import export_response
from glowfit.core.config import get_db
from glowfit.core.security import get_current_user
from glowfit.models.user import User
from glowfit.schemas.common import ApiResponse
from glowfit.schemas.dashboard import DashboardStats
from glowfit.services.dashboard import ExportFormat, dashboard_service

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=ApiResponse[DashboardStats], summary="Dashboard counters")
def get_stats(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Plan and item totals, unread notifications and active reminders of the user."""
    return ok(dashboard_service.get_stats(db, current_user))


@router.get("/export", summary="Export my data")
def export_data(
    type: str = Query("personal"),
    format: ExportFormat = Query(ExportFormat.json),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Export one of the user's data sets as JSON or CSV.

    Types: personal, glow-plans, fitness-items, glow-history,
    fitness-history, notifications.
    """
    rows, columns = dashboard_service.export_user_data(db, current_user, type)
    return export_response(rows, columns, type, format)
