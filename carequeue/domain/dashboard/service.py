"""Dashboard service - read-only daily figures over appointments and staff"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...cache import get_dashboard_stats_cached, set_dashboard_stats_cached
from ...models import AppointmentStatus
from ...shared import dates
from ..appointments.engine import AssignmentEngine
from ..appointments.repository import AppointmentRepository
from ..staff.repository import StaffRepository

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.staff_repo = StaffRepository()
        self.engine = AssignmentEngine(db)

    def get_stats(self, day: Optional[date] = None) -> dict:
        """Stats for one business-local day (today by default), served from cache when warm"""
        day = day or dates.today()

        cached = get_dashboard_stats_cached(day)
        if cached is not None:
            return cached

        stats = self.compute_stats(day)
        set_dashboard_stats_cached(day, stats)
        return stats

    def compute_stats(self, day: date) -> dict:
        start, end = dates.day_bounds(day)

        staff_load = []
        for staff in self.staff_repo.get_staff_list(self.db):
            # Same counting routine the engine enforces capacity with
            count = self.engine.compute_capacity(staff.id, day)
            staff_load.append(
                {
                    "id": staff.id,
                    "name": staff.name,
                    "load": f"{count}/{staff.daily_capacity}",
                    "status": "FULL" if count >= staff.daily_capacity else "OK",
                }
            )

        stats = {
            "todayTotal": self.repo.count_by_status(self.db, start, end),
            "completedToday": self.repo.count_by_status(
                self.db, start, end, AppointmentStatus.COMPLETED.value
            ),
            "pendingToday": self.repo.count_by_status(
                self.db, start, end, AppointmentStatus.SCHEDULED.value
            ),
            "waitingQueue": self.repo.count_queue(self.db),
            "staffLoad": staff_load,
        }
        logger.debug(f"📊 Dashboard stats computed for {day}")
        return stats
