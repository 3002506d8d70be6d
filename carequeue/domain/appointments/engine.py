"""
Assignment engine - decides staff-or-queue for every appointment write.

Capacity rule: a staff member never holds more SCHEDULED appointments on one
business-local calendar day than their daily capacity. Every operation that
can break the rule runs under the assignment lock, locks the staff row it
writes against, and recounts after flushing before it commits.
"""

import logging
import threading
from collections import defaultdict
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...cache import invalidate_dashboard_cache
from ...exceptions import AssignmentError, CareQueueError, ConflictError, NotFoundError
from ...models import Appointment, AppointmentStatus, Assigned, Queued, Service, Staff, StaffStatus
from ...shared import dates
from ..activity.service import ActivityService
from ..catalog.repository import CatalogRepository
from ..staff.repository import StaffRepository
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)

# Serializes capacity-check-then-write within this process. Row locks on the
# staff table cover other processes when the database supports them.
assignment_lock = threading.RLock()

SCHEDULED = AppointmentStatus.SCHEDULED.value


class AssignmentEngine:
    """Staff selection, capacity enforcement and queue processing"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.staff_repo = StaffRepository()
        self.catalog_repo = CatalogRepository()
        self.activity = ActivityService(db)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def compute_capacity(
        self, staff_id: int, day: date, exclude_appointment_id: Optional[int] = None
    ) -> int:
        """Number of SCHEDULED appointments a staff member holds on a calendar day"""
        start, end = dates.day_bounds(day)
        return self.repo.count_scheduled_for_staff(
            self.db, staff_id, start, end, exclude_id=exclude_appointment_id
        )

    def find_available_staff(
        self, service: Service, day: date, exclude_appointment_id: Optional[int] = None
    ) -> Optional[Staff]:
        """
        Pick the staff member for an auto-assignment.

        Candidates match the service's required type, are AVAILABLE and are
        below capacity on the day. Lowest current load wins, then lowest id.
        """
        best: Optional[Staff] = None
        best_key: Optional[tuple[int, int]] = None

        for staff in self.staff_repo.get_eligible_staff(self.db, service.required_staff_type):
            load = self.compute_capacity(staff.id, day, exclude_appointment_id)
            if load >= staff.daily_capacity:
                continue
            key = (load, staff.id)
            if best_key is None or key < best_key:
                best, best_key = staff, key

        return best

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def request_assignment(
        self,
        customer_name: str,
        service_id: int,
        appointment_at: datetime,
        staff_id: Optional[int] = None,
    ) -> Appointment:
        """
        Create an appointment.

        With staff_id the choice is validated and rejected with AssignmentError
        if ineligible; nothing is created in that case. Without staff_id the
        engine auto-assigns, or leaves the appointment queued.
        """
        with assignment_lock:
            try:
                service = self._get_service(service_id)

                if staff_id is not None:
                    staff = self._lock_staff(staff_id)
                    self._check_staff(staff, service, appointment_at)
                    appointment = self.repo.create_appointment(
                        self.db,
                        customer_name=customer_name,
                        service_id=service.id,
                        staff_id=staff.id,
                        appointment_at=appointment_at,
                        status=SCHEDULED,
                    )
                    self._verify_capacity(staff, appointment_at)
                else:
                    appointment = self.repo.create_appointment(
                        self.db,
                        customer_name=customer_name,
                        service_id=service.id,
                        staff_id=None,
                        appointment_at=appointment_at,
                        status=SCHEDULED,
                    )
                    staff = self._auto_assign(appointment, service)
            except CareQueueError:
                self.db.rollback()
                raise

            if staff is not None:
                self.activity.record(f"Appointment for {customer_name} assigned to {staff.name}")
            else:
                logger.info(
                    f"⏳ No {service.required_staff_type} available on "
                    f"{dates.local_date(appointment_at)}, appointment queued"
                )
                self.activity.record(f"Appointment for {customer_name} added to waiting queue")

            self._commit()
            self.db.refresh(appointment)
            return appointment

    def reassign(self, appointment_id: int, staff_id: Optional[int]) -> Appointment:
        """Move an appointment to another staff member, or back to the queue with None"""
        return self.update_appointment(appointment_id, {"staff_id": staff_id})

    def update_appointment(self, appointment_id: int, changes: dict[str, Any]) -> Appointment:
        """
        Apply an admin edit.

        changes uses model attribute names. A "staff_id" key (even None) is an
        explicit reassignment; without it the current assignment is kept and
        re-validated when the service, time or status change affects it.
        """
        with assignment_lock:
            appointment = self._get_appointment(appointment_id)
            try:
                service = appointment.service
                if "service_id" in changes and changes["service_id"] != appointment.service_id:
                    service = self._get_service(changes["service_id"])

                appointment_at = changes.get("appointment_at", appointment.appointment_at)
                status = changes.get("status", appointment.status)
                staff_changed = "staff_id" in changes and changes["staff_id"] != appointment.staff_id
                target_id = changes["staff_id"] if "staff_id" in changes else appointment.staff_id

                staff = None
                if target_id is not None and (
                    staff_changed
                    or service.id != appointment.service_id
                    or appointment_at != appointment.appointment_at
                    or (status == SCHEDULED and appointment.status != SCHEDULED)
                ):
                    staff = self._lock_staff(target_id)
                    self._check_staff(
                        staff,
                        service,
                        appointment_at,
                        exclude_appointment_id=appointment.id,
                        scheduled=status == SCHEDULED,
                    )

                self.repo.update_appointment(self.db, appointment, **changes)

                if staff is not None and status == SCHEDULED:
                    self._verify_capacity(staff, appointment_at)
            except CareQueueError:
                self.db.rollback()
                raise

            self.activity.record(self._describe_edit(appointment, changes, staff_changed, staff))
            self._commit()
            self.db.refresh(appointment)
            return appointment

    def process_queue(self) -> dict:
        """
        Auto-assign queued appointments, earliest appointment time first.

        Each assignment is committed before the next item is evaluated so the
        capacity it consumes is visible to the rest of the batch. Items that
        cannot be placed stay queued and are counted as skipped.
        """
        with assignment_lock:
            queued = self.repo.get_waiting_queue(self.db)
            processed = len(queued)
            assigned = 0

            for appointment in queued:
                try:
                    staff = self._auto_assign(appointment, appointment.service)
                    if staff is None:
                        logger.debug(f"Appointment {appointment.id} still unassignable, skipped")
                        continue
                    self.db.commit()
                    assigned += 1
                    logger.info(f"✅ Queued appointment {appointment.id} assigned to staff {staff.id}")
                except Exception as e:
                    self.db.rollback()
                    logger.error(f"❌ Failed to assign queued appointment {appointment.id}: {e}")

            skipped = processed - assigned
            if assigned:
                self.activity.record(f"Auto-assigned {assigned} appointment(s) from waiting queue")
            self._commit()

            logger.info(f"📊 Queue run: processed={processed}, assigned={assigned}, skipped={skipped}")
            return {
                "processed": processed,
                "assigned": assigned,
                "skipped": skipped,
                "message": f"{assigned} appointment(s) assigned, {skipped} skipped",
            }

    # ------------------------------------------------------------------
    # Requeue hooks used by the staff registry and service catalog.
    # They flush but do not commit; the caller owns the transaction.
    # ------------------------------------------------------------------

    def requeue_staff_appointments(self, staff: Staff) -> int:
        """Return all of a staff member's SCHEDULED appointments to the queue"""
        with assignment_lock:
            appointments = self.repo.get_scheduled_for_staff(self.db, staff.id)
            for appointment in appointments:
                self.repo.update_appointment(self.db, appointment, staff_id=None)
            return len(appointments)

    def enforce_staff_capacity(self, staff: Staff) -> int:
        """Requeue the latest appointments on any day where a staff member is over capacity"""
        with assignment_lock:
            by_day: dict[date, list[Appointment]] = defaultdict(list)
            for appointment in self.repo.get_scheduled_for_staff(self.db, staff.id):
                by_day[dates.local_date(appointment.appointment_at)].append(appointment)

            requeued = 0
            for day, appointments in by_day.items():
                surplus = appointments[staff.daily_capacity:]
                for appointment in surplus:
                    self.repo.update_appointment(self.db, appointment, staff_id=None)
                if surplus:
                    logger.info(f"⚠️ Staff {staff.id} over capacity on {day}, requeued {len(surplus)}")
                requeued += len(surplus)
            return requeued

    def requeue_type_mismatches(self, service: Service) -> int:
        """Requeue a service's appointments whose staff no longer matches its required type"""
        with assignment_lock:
            requeued = 0
            for appointment in self.repo.get_assigned_for_service(self.db, service.id):
                if appointment.staff.service_type != service.required_staff_type:
                    self.repo.update_appointment(self.db, appointment, staff_id=None)
                    requeued += 1
            return requeued

    def requeue_staff_type_mismatches(self, staff: Staff) -> int:
        """Requeue a staff member's appointments for services requiring another type"""
        with assignment_lock:
            requeued = 0
            for appointment in self.repo.get_scheduled_for_staff(self.db, staff.id):
                if appointment.service.required_staff_type != staff.service_type:
                    self.repo.update_appointment(self.db, appointment, staff_id=None)
                    requeued += 1
            return requeued

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _auto_assign(self, appointment: Appointment, service: Service) -> Optional[Staff]:
        """Place a flushed, queued appointment with the best candidate, if any"""
        day = dates.local_date(appointment.appointment_at)

        # One retry covers a candidate changed or filled by a concurrent writer
        for _attempt in range(2):
            candidate = self.find_available_staff(service, day, exclude_appointment_id=appointment.id)
            if candidate is None:
                return None

            staff = self._lock_staff(candidate.id)
            if (
                staff.status != StaffStatus.AVAILABLE.value
                or staff.service_type != service.required_staff_type
            ):
                logger.warning(f"⚠️ Staff {staff.id} changed before assignment, retrying")
                continue

            self.repo.update_appointment(self.db, appointment, staff_id=staff.id)
            if self.compute_capacity(staff.id, day) <= staff.daily_capacity:
                return staff

            logger.warning(f"⚠️ Capacity race on staff {staff.id} for {day}, retrying")
            self.repo.update_appointment(self.db, appointment, staff_id=None)

        return None

    def _check_staff(
        self,
        staff: Staff,
        service: Service,
        appointment_at: datetime,
        exclude_appointment_id: Optional[int] = None,
        scheduled: bool = True,
    ) -> None:
        """Raise AssignmentError if staff cannot take the appointment"""
        if staff.service_type != service.required_staff_type:
            raise AssignmentError(
                AssignmentError.TYPE_MISMATCH,
                f"{staff.name} is a {staff.service_type}, but {service.name} requires a "
                f"{service.required_staff_type}",
            )

        # Availability and capacity only matter for appointments still to happen
        if not scheduled:
            return

        if staff.status != StaffStatus.AVAILABLE.value:
            raise AssignmentError(
                AssignmentError.STAFF_UNAVAILABLE, f"{staff.name} is not available"
            )

        day = dates.local_date(appointment_at)
        load = self.compute_capacity(staff.id, day, exclude_appointment_id)
        if load >= staff.daily_capacity:
            raise AssignmentError(
                AssignmentError.STAFF_AT_CAPACITY,
                f"{staff.name} already has {load} of {staff.daily_capacity} appointments on {day}",
            )

    def _verify_capacity(self, staff: Staff, appointment_at: datetime) -> None:
        """Recount after a flush; a concurrent writer may have taken the last slot"""
        day = dates.local_date(appointment_at)
        if self.compute_capacity(staff.id, day) > staff.daily_capacity:
            raise ConflictError(
                f"{staff.name} reached capacity on {day} while this request was processed"
            )

    def _get_service(self, service_id: int) -> Service:
        service = self.catalog_repo.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError("Service", service_id)
        return service

    def _get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def _lock_staff(self, staff_id: int) -> Staff:
        staff = self.staff_repo.get_staff_for_update(self.db, staff_id)
        if not staff:
            raise NotFoundError("Staff", staff_id)
        return staff

    def _describe_edit(
        self,
        appointment: Appointment,
        changes: dict[str, Any],
        staff_changed: bool,
        staff: Optional[Staff],
    ) -> str:
        name = appointment.customer_name
        if staff_changed:
            slot = appointment.slot
            if isinstance(slot, Queued):
                return f"Appointment for {name} moved to waiting queue"
            if isinstance(slot, Assigned):
                return f"Appointment for {name} assigned to {staff.name}"
        if "status" in changes:
            return f"Appointment for {name} marked {appointment.status}"
        return f"Appointment for {name} updated"

    def _commit(self) -> None:
        self.db.commit()
        invalidate_dashboard_cache()
