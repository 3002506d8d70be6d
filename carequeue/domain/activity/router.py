"""Activity log router"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.dates import as_utc
from .schemas import ActivityLogResponse
from .service import DEFAULT_LIMIT, MAX_LIMIT, ActivityService

router = APIRouter(prefix="/activity-log", tags=["Activity"])


def get_activity_service(db: Session = Depends(get_db)) -> ActivityService:
    """Dependency injection for ActivityService"""
    return ActivityService(db)


@router.get("", response_model=list[ActivityLogResponse])
async def get_activity_logs(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    service: ActivityService = Depends(get_activity_service),
):
    """Get the most recent activity entries, newest first"""
    return [
        ActivityLogResponse(id=e.id, message=e.message, createdAt=as_utc(e.created_at))
        for e in service.recent(limit)
    ]
