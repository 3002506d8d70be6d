"""Staff service - Business logic for the staff registry"""

import logging

from sqlalchemy.orm import Session

from ...cache import invalidate_dashboard_cache
from ...exceptions import NotFoundError, ValidationError
from ...models import Staff, StaffStatus
from ..activity.service import ActivityService
from ..appointments.engine import AssignmentEngine, assignment_lock
from .repository import StaffRepository
from .schemas import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    """Service layer for staff registry operations.

    Changes that take appointments away from a staff member (leave, deletion,
    a lower capacity, a different type) requeue them in the same transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = StaffRepository()
        self.engine = AssignmentEngine(db)
        self.activity = ActivityService(db)

    def get_staff_list(self) -> list[Staff]:
        return self.repo.get_staff_list(self.db)

    def get_staff(self, staff_id: int) -> Staff:
        staff = self.repo.get_staff_by_id(self.db, staff_id)
        if not staff:
            raise NotFoundError("Staff", staff_id)
        return staff

    def create_staff(self, data: StaffCreate) -> Staff:
        staff = self.repo.create_staff(
            self.db,
            name=data.name,
            service_type=data.serviceType.value,
            daily_capacity=data.dailyCapacity,
            status=data.status.value,
        )
        self.activity.record(f"Staff {staff.name} added ({staff.service_type})")
        self._commit()
        self.db.refresh(staff)
        return staff

    def update_staff(self, staff_id: int, data: StaffUpdate) -> Staff:
        for field in ("name", "serviceType", "dailyCapacity", "status"):
            if field in data.model_fields_set and getattr(data, field) is None:
                raise ValidationError(f"{field} cannot be null")

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.serviceType is not None:
            updates["service_type"] = data.serviceType.value
        if data.dailyCapacity is not None:
            updates["daily_capacity"] = data.dailyCapacity
        if data.status is not None:
            updates["status"] = data.status.value

        # Held until commit so no assignment lands between the change and its requeue
        with assignment_lock:
            staff = self._lock_staff(staff_id)
            previous_type = staff.service_type
            previous_capacity = staff.daily_capacity
            self.repo.update_staff(self.db, staff, **updates)

            requeued = 0
            if staff.status == StaffStatus.ON_LEAVE.value:
                requeued = self.engine.requeue_staff_appointments(staff)
            else:
                if staff.service_type != previous_type:
                    requeued += self.engine.requeue_staff_type_mismatches(staff)
                if staff.daily_capacity < previous_capacity:
                    requeued += self.engine.enforce_staff_capacity(staff)

            if requeued:
                logger.info(f"⏳ Requeued {requeued} appointment(s) after updating staff {staff.id}")
                self.activity.record(
                    f"{requeued} appointment(s) of {staff.name} moved to waiting queue"
                )
            self.activity.record(f"Staff {staff.name} updated")
            self._commit()

        self.db.refresh(staff)
        return staff

    def delete_staff(self, staff_id: int) -> dict:
        """Delete a staff member, returning their SCHEDULED appointments to the queue"""
        with assignment_lock:
            staff = self._lock_staff(staff_id)
            name = staff.name

            requeued = self.engine.requeue_staff_appointments(staff)
            self.repo.delete_staff(self.db, staff)

            message = f"Staff {name} deleted"
            if requeued:
                message += f", {requeued} appointment(s) moved to waiting queue"
            self.activity.record(message)
            self._commit()

        return {"message": "Staff deleted", "requeued": requeued}

    def _lock_staff(self, staff_id: int) -> Staff:
        staff = self.repo.get_staff_for_update(self.db, staff_id)
        if not staff:
            raise NotFoundError("Staff", staff_id)
        return staff

    def _commit(self) -> None:
        self.db.commit()
        invalidate_dashboard_cache()
