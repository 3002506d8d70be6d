"""Appointment repository - Database operations for appointments"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations.

    Writes are flushed, not committed; the assignment engine and the
    appointment service own the transaction boundaries.
    """

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.service), joinedload(Appointment.staff))
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_appointments(
        db: Session,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        staff_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Appointment]:
        """List appointments, optionally within [start, end) and by staff/status"""
        query = db.query(Appointment).options(
            joinedload(Appointment.service), joinedload(Appointment.staff)
        )

        if start is not None:
            query = query.filter(Appointment.appointment_at >= start)
        if end is not None:
            query = query.filter(Appointment.appointment_at < end)
        if staff_id is not None:
            query = query.filter(Appointment.staff_id == staff_id)
        if status:
            query = query.filter(Appointment.status == status)

        return query.order_by(Appointment.appointment_at, Appointment.id).all()

    @staticmethod
    def get_waiting_queue(db: Session) -> list[Appointment]:
        """Queued appointments, earliest appointment time first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.service), joinedload(Appointment.staff))
            .filter(
                Appointment.staff_id.is_(None),
                Appointment.status == AppointmentStatus.SCHEDULED.value,
            )
            .order_by(Appointment.appointment_at, Appointment.id)
            .all()
        )

    @staticmethod
    def count_queue(db: Session) -> int:
        return (
            db.query(func.count(Appointment.id))
            .filter(
                Appointment.staff_id.is_(None),
                Appointment.status == AppointmentStatus.SCHEDULED.value,
            )
            .scalar()
        )

    @staticmethod
    def count_scheduled_for_staff(
        db: Session,
        staff_id: int,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> int:
        """Count a staff member's SCHEDULED appointments within [start, end)"""
        query = db.query(func.count(Appointment.id)).filter(
            Appointment.staff_id == staff_id,
            Appointment.status == AppointmentStatus.SCHEDULED.value,
            Appointment.appointment_at >= start,
            Appointment.appointment_at < end,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.scalar()

    @staticmethod
    def count_by_status(
        db: Session, start: datetime, end: datetime, status: Optional[str] = None
    ) -> int:
        query = db.query(func.count(Appointment.id)).filter(
            Appointment.appointment_at >= start,
            Appointment.appointment_at < end,
        )
        if status:
            query = query.filter(Appointment.status == status)
        return query.scalar()

    @staticmethod
    def get_scheduled_for_staff(db: Session, staff_id: int) -> list[Appointment]:
        """A staff member's SCHEDULED appointments, earliest first"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.staff_id == staff_id,
                Appointment.status == AppointmentStatus.SCHEDULED.value,
            )
            .order_by(Appointment.appointment_at, Appointment.id)
            .all()
        )

    @staticmethod
    def get_assigned_for_service(db: Session, service_id: int) -> list[Appointment]:
        """SCHEDULED appointments of a service that currently hold a staff member"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.staff))
            .filter(
                Appointment.service_id == service_id,
                Appointment.staff_id.isnot(None),
                Appointment.status == AppointmentStatus.SCHEDULED.value,
            )
            .all()
        )

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Apply updates, including explicit None values (used to requeue)"""
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        db.flush()
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.flush()
