"""Service catalog router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Service
from ...shared.dates import as_utc
from .schemas import ServiceCreate, ServiceResponse, ServiceUpdate
from .service import CatalogService

router = APIRouter(prefix="/service", tags=["Services"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


def to_response(service: Service) -> ServiceResponse:
    return ServiceResponse(
        id=service.id,
        name=service.name,
        duration=service.duration,
        requiredStaffType=service.required_staff_type,
        createdAt=as_utc(service.created_at),
    )


@router.get("", response_model=list[ServiceResponse])
async def get_services(catalog: CatalogService = Depends(get_catalog_service)):
    return [to_response(s) for s in catalog.get_services()]


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    return to_response(catalog.get_service(service_id))


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(
    data: ServiceCreate, catalog: CatalogService = Depends(get_catalog_service)
):
    return to_response(catalog.create_service(data))


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return to_response(catalog.update_service(service_id, data))


@router.delete("/{service_id}")
async def delete_service(service_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    """Delete a service that no appointment references"""
    return catalog.delete_service(service_id)
