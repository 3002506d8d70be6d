"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import AppointmentStatus, ServiceDuration, StaffType
from ...shared.validators import validate_display_name


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment; omit staffId to auto-assign"""

    customerName: str
    serviceId: int
    appointmentAt: datetime
    staffId: Optional[int] = None

    @field_validator("customerName")
    @classmethod
    def validate_customer_name(cls, v):
        return validate_display_name(v, "Customer name")


class AppointmentUpdate(BaseModel):
    """
    Schema for partial updates.

    An explicit "staffId": null moves the appointment to the waiting queue;
    leaving the key out keeps the current assignment.
    """

    customerName: Optional[str] = None
    serviceId: Optional[int] = None
    staffId: Optional[int] = None
    appointmentAt: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None

    @field_validator("customerName")
    @classmethod
    def validate_customer_name(cls, v):
        return validate_display_name(v, "Customer name")


class ServiceSummary(BaseModel):
    name: str
    duration: ServiceDuration
    requiredStaffType: StaffType


class StaffSummary(BaseModel):
    name: str


class AppointmentResponse(BaseModel):
    id: int
    customerName: str
    serviceId: int
    service: Optional[ServiceSummary] = None
    staffId: Optional[int] = None
    staff: Optional[StaffSummary] = None
    appointmentAt: datetime
    status: AppointmentStatus
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class QueueRunResponse(BaseModel):
    processed: int
    assigned: int
    skipped: int
    message: str
