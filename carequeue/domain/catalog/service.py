"""Service catalog - business logic for bookable services"""

import logging

from sqlalchemy.orm import Session

from ...cache import invalidate_dashboard_cache
from ...exceptions import ConflictError, NotFoundError, ValidationError
from ...models import Service
from ..activity.service import ActivityService
from ..appointments.engine import AssignmentEngine, assignment_lock
from .repository import CatalogRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()
        self.engine = AssignmentEngine(db)
        self.activity = ActivityService(db)

    def get_services(self) -> list[Service]:
        return self.repo.get_services(self.db)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError("Service", service_id)
        return service

    def create_service(self, data: ServiceCreate) -> Service:
        service = self.repo.create_service(
            self.db,
            name=data.name,
            duration=data.duration.value,
            required_staff_type=data.requiredStaffType.value,
        )
        self.activity.record(f"Service {service.name} added")
        self._commit()
        self.db.refresh(service)
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        """Update a service; a new required staff type requeues mismatched appointments"""
        for field in ("name", "duration", "requiredStaffType"):
            if field in data.model_fields_set and getattr(data, field) is None:
                raise ValidationError(f"{field} cannot be null")

        with assignment_lock:
            service = self.get_service(service_id)
            previous_type = service.required_staff_type
            self.repo.update_service(
                self.db,
                service,
                name=data.name,
                duration=data.duration.value if data.duration else None,
                required_staff_type=data.requiredStaffType.value if data.requiredStaffType else None,
            )

            if service.required_staff_type != previous_type:
                requeued = self.engine.requeue_type_mismatches(service)
                if requeued:
                    logger.info(f"⏳ Requeued {requeued} appointment(s) of service {service.id}")
                    self.activity.record(
                        f"{requeued} {service.name} appointment(s) moved to waiting queue"
                    )

            self.activity.record(f"Service {service.name} updated")
            self._commit()

        self.db.refresh(service)
        return service

    def delete_service(self, service_id: int) -> dict:
        service = self.get_service(service_id)

        in_use = self.repo.count_appointments(self.db, service.id)
        if in_use:
            raise ConflictError(
                f"Service {service.name} is used by {in_use} appointment(s) and cannot be deleted"
            )

        name = service.name
        self.repo.delete_service(self.db, service)
        self.activity.record(f"Service {name} deleted")
        self._commit()

        return {"message": "Service deleted"}

    def _commit(self) -> None:
        self.db.commit()
        invalidate_dashboard_cache()
