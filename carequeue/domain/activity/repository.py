"""Activity log repository - Database operations for activity entries"""

from sqlalchemy.orm import Session

from ...models import ActivityLog


class ActivityRepository:
    """Repository for activity log database operations"""

    @staticmethod
    def add_entry(db: Session, message: str) -> ActivityLog:
        """Stage a new entry; committed with the caller's transaction"""
        entry = ActivityLog(message=message)
        db.add(entry)
        return entry

    @staticmethod
    def get_recent(db: Session, limit: int) -> list[ActivityLog]:
        """Get the newest entries first"""
        return (
            db.query(ActivityLog)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
            .all()
        )
