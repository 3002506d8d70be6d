"""Appointment router - FastAPI endpoints for booking and the waiting queue"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Appointment, AppointmentStatus
from ...shared.dates import as_utc
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    QueueRunResponse,
    ServiceSummary,
    StaffSummary,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointment", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


def to_response(appointment: Appointment) -> AppointmentResponse:
    service = appointment.service
    staff = appointment.staff
    return AppointmentResponse(
        id=appointment.id,
        customerName=appointment.customer_name,
        serviceId=appointment.service_id,
        service=(
            ServiceSummary(
                name=service.name,
                duration=service.duration,
                requiredStaffType=service.required_staff_type,
            )
            if service
            else None
        ),
        staffId=appointment.staff_id,
        staff=StaffSummary(name=staff.name) if staff else None,
        appointmentAt=as_utc(appointment.appointment_at),
        status=appointment.status,
        createdAt=as_utc(appointment.created_at),
        updatedAt=as_utc(appointment.updated_at),
    )


# ============================================================================
# QUEUE OPERATIONS
# ============================================================================


@router.get("/waiting-queue", response_model=list[AppointmentResponse])
async def get_waiting_queue(service: AppointmentService = Depends(get_appointment_service)):
    """Get queued appointments, earliest appointment time first"""
    return [to_response(a) for a in service.get_waiting_queue()]


@router.patch("/assign-queue", response_model=QueueRunResponse)
async def assign_queue(service: AppointmentService = Depends(get_appointment_service)):
    """Auto-assign every queued appointment that can be placed"""
    return service.assign_queue()


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[AppointmentResponse])
async def get_appointments(
    date: Optional[str] = Query(None, description="Calendar day, YYYY-MM-DD"),
    staffId: Optional[int] = Query(None),
    status: Optional[AppointmentStatus] = Query(None),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get appointments, optionally filtered by day, staff member and status"""
    appointments = service.get_appointments(
        date=date, staff_id=staffId, status=status.value if status else None
    )
    return [to_response(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    return to_response(service.get_appointment(appointment_id))


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment (queued when no staff can take it)"""
    return to_response(service.create_appointment(data))


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Update an appointment"""
    return to_response(service.update_appointment(appointment_id, data))


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete an appointment"""
    return service.delete_appointment(appointment_id)
