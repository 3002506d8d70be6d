"""Dashboard router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import DashboardStats
from .service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(db)


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(service: DashboardService = Depends(get_dashboard_service)):
    """Today's totals, waiting queue size and per-staff load"""
    return service.get_stats()
