"""Staff domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...config import DEFAULT_DAILY_CAPACITY, MAX_DAILY_CAPACITY
from ...models import StaffStatus, StaffType
from ...shared.validators import validate_display_name


class StaffCreate(BaseModel):
    """Schema for creating a staff member"""

    name: str
    serviceType: StaffType
    dailyCapacity: int = Field(DEFAULT_DAILY_CAPACITY, ge=1, le=MAX_DAILY_CAPACITY)
    status: StaffStatus = StaffStatus.AVAILABLE

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_display_name(v)


class StaffUpdate(BaseModel):
    """Schema for updating a staff member; omitted fields are left unchanged"""

    name: Optional[str] = None
    serviceType: Optional[StaffType] = None
    dailyCapacity: Optional[int] = Field(None, ge=1, le=MAX_DAILY_CAPACITY)
    status: Optional[StaffStatus] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_display_name(v)


class StaffResponse(BaseModel):
    id: int
    name: str
    serviceType: StaffType
    dailyCapacity: int
    status: StaffStatus
    createdAt: Optional[datetime] = None
