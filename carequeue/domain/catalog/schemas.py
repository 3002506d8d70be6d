"""Service catalog schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import ServiceDuration, StaffType
from ...shared.validators import validate_display_name


class ServiceCreate(BaseModel):
    name: str
    duration: ServiceDuration
    requiredStaffType: StaffType

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_display_name(v, "Service name")


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    duration: Optional[ServiceDuration] = None
    requiredStaffType: Optional[StaffType] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_display_name(v, "Service name")


class ServiceResponse(BaseModel):
    id: int
    name: str
    duration: ServiceDuration
    requiredStaffType: StaffType
    createdAt: Optional[datetime] = None
