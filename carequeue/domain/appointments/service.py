"""Appointment service - request handling around the assignment engine"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...cache import invalidate_dashboard_cache
from ...exceptions import NotFoundError, ValidationError
from ...models import Appointment
from ...shared import dates
from ...shared.validators import parse_date_filter, validate_future
from ..activity.service import ActivityService
from .engine import AssignmentEngine
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate

logger = logging.getLogger(__name__)


class AppointmentService:
    """Service layer for appointment operations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.engine = AssignmentEngine(db)
        self.activity = ActivityService(db)

    def get_appointments(
        self,
        date: Optional[str] = None,
        staff_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """List appointments, optionally for one calendar day, staff member or status"""
        day = parse_date_filter(date)
        start = end = None
        if day is not None:
            start, end = dates.day_bounds(day)
        return self.repo.get_appointments(self.db, start, end, staff_id, status)

    def get_waiting_queue(self) -> list[Appointment]:
        return self.repo.get_waiting_queue(self.db)

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment", appointment_id)
        return appointment

    def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """Book an appointment; auto-assigns when no staff is given"""
        appointment_at = validate_future(data.appointmentAt)
        logger.info(
            f"📥 Booking {data.customerName} for service {data.serviceId} "
            f"({'staff ' + str(data.staffId) if data.staffId else 'auto-assign'})"
        )
        return self.engine.request_assignment(
            customer_name=data.customerName,
            service_id=data.serviceId,
            appointment_at=appointment_at,
            staff_id=data.staffId,
        )

    def update_appointment(self, appointment_id: int, data: AppointmentUpdate) -> Appointment:
        """Update an appointment; staff, service and time changes go through the engine"""
        appointment = self.get_appointment(appointment_id)

        provided = data.model_fields_set
        for field in ("customerName", "serviceId", "appointmentAt", "status"):
            if field in provided and getattr(data, field) is None:
                raise ValidationError(f"{field} cannot be null")

        changes = {}
        if data.customerName is not None:
            changes["customer_name"] = data.customerName
        if data.serviceId is not None:
            changes["service_id"] = data.serviceId
        if data.appointmentAt is not None:
            # Only a moved time must be in the future; edits resend the current one
            appointment_at = dates.to_storage(data.appointmentAt)
            if appointment_at != appointment.appointment_at:
                appointment_at = validate_future(data.appointmentAt)
            changes["appointment_at"] = appointment_at
        if data.status is not None:
            changes["status"] = data.status.value
        if "staffId" in provided:
            changes["staff_id"] = data.staffId

        if not changes:
            raise ValidationError("No fields to update")

        return self.engine.update_appointment(appointment_id, changes)

    def delete_appointment(self, appointment_id: int) -> dict:
        """Hard delete an appointment"""
        appointment = self.get_appointment(appointment_id)
        name = appointment.customer_name

        self.repo.delete_appointment(self.db, appointment)
        self.activity.record(f"Appointment for {name} deleted")
        self.db.commit()
        invalidate_dashboard_cache()

        return {"message": "Appointment deleted"}

    def assign_queue(self) -> dict:
        return self.engine.process_queue()
