import enum
from dataclasses import dataclass
from typing import Union

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class StaffType(str, enum.Enum):
    DOCTOR = "DOCTOR"
    CONSULTANT = "CONSULTANT"
    SUPPORT_AGENT = "SUPPORT_AGENT"


class StaffStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    ON_LEAVE = "ON_LEAVE"


class ServiceDuration(str, enum.Enum):
    MIN_15 = "MIN_15"
    MIN_30 = "MIN_30"
    MIN_60 = "MIN_60"


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


@dataclass(frozen=True)
class Assigned:
    staff_id: int


@dataclass(frozen=True)
class Queued:
    pass


Slot = Union[Assigned, Queued]


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    service_type = Column(String(20), nullable=False, index=True)  # StaffType
    daily_capacity = Column(Integer, nullable=False, default=5)
    status = Column(String(20), nullable=False, default=StaffStatus.AVAILABLE.value)  # StaffStatus
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="staff")


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    duration = Column(String(10), nullable=False)  # ServiceDuration
    required_staff_type = Column(String(20), nullable=False)  # StaffType
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship("Appointment", back_populates="service")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(255), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    # NULL while the appointment waits in the queue
    staff_id = Column(Integer, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True, index=True)
    appointment_at = Column(DateTime, nullable=False, index=True)  # naive UTC
    status = Column(
        String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value, index=True
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service = relationship("Service", back_populates="appointments")
    staff = relationship("Staff", back_populates="appointments")

    @property
    def slot(self) -> Slot:
        """Assignment state as an explicit Assigned/Queued value"""
        if self.staff_id is None:
            return Queued()
        return Assigned(staff_id=self.staff_id)

    @property
    def is_queued(self) -> bool:
        return isinstance(self.slot, Queued) and self.status == AppointmentStatus.SCHEDULED.value


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), index=True)
