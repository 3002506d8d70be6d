"""Staff router - FastAPI endpoints for the staff registry"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Staff
from ...shared.dates import as_utc
from .schemas import StaffCreate, StaffResponse, StaffUpdate
from .service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])


def get_staff_service(db: Session = Depends(get_db)) -> StaffService:
    """Dependency injection for StaffService"""
    return StaffService(db)


def to_response(staff: Staff) -> StaffResponse:
    return StaffResponse(
        id=staff.id,
        name=staff.name,
        serviceType=staff.service_type,
        dailyCapacity=staff.daily_capacity,
        status=staff.status,
        createdAt=as_utc(staff.created_at),
    )


@router.get("", response_model=list[StaffResponse])
async def get_staff_list(service: StaffService = Depends(get_staff_service)):
    return [to_response(s) for s in service.get_staff_list()]


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(staff_id: int, service: StaffService = Depends(get_staff_service)):
    return to_response(service.get_staff(staff_id))


@router.post("", response_model=StaffResponse, status_code=201)
async def create_staff(data: StaffCreate, service: StaffService = Depends(get_staff_service)):
    """Add a staff member"""
    return to_response(service.create_staff(data))


@router.patch("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: int,
    data: StaffUpdate,
    service: StaffService = Depends(get_staff_service),
):
    """Update a staff member (going on leave requeues their appointments)"""
    return to_response(service.update_staff(staff_id, data))


@router.delete("/{staff_id}")
async def delete_staff(staff_id: int, service: StaffService = Depends(get_staff_service)):
    """Delete a staff member"""
    return service.delete_staff(staff_id)
