"""Activity log service"""

import logging

from sqlalchemy.orm import Session

from ...models import ActivityLog
from .repository import ActivityRepository

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class ActivityService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ActivityRepository()

    def record(self, message: str) -> ActivityLog:
        """Add an entry to the current transaction (the caller commits)"""
        logger.info(f"📝 {message}")
        return self.repo.add_entry(self.db, message)

    def recent(self, limit: int = DEFAULT_LIMIT) -> list[ActivityLog]:
        limit = max(1, min(limit, MAX_LIMIT))
        return self.repo.get_recent(self.db, limit)
