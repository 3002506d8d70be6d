"""Service catalog repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Appointment, Service


class CatalogRepository:
    """Repository for service catalog database operations"""

    @staticmethod
    def get_services(db: Session) -> list[Service]:
        return db.query(Service).order_by(Service.id).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.flush()
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.flush()
        return service

    @staticmethod
    def count_appointments(db: Session, service_id: int) -> int:
        """Number of appointments referencing a service (any status)"""
        return (
            db.query(func.count(Appointment.id))
            .filter(Appointment.service_id == service_id)
            .scalar()
        )

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.flush()
