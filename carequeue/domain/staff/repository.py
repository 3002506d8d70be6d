"""Staff repository - Database operations for staff members"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Staff, StaffStatus


class StaffRepository:
    """Repository for staff database operations.

    Writes are flushed, not committed; the calling service owns the transaction.
    """

    @staticmethod
    def get_staff_list(db: Session) -> list[Staff]:
        return db.query(Staff).order_by(Staff.id).all()

    @staticmethod
    def get_staff_by_id(db: Session, staff_id: int) -> Optional[Staff]:
        return db.query(Staff).filter(Staff.id == staff_id).first()

    @staticmethod
    def get_staff_for_update(db: Session, staff_id: int) -> Optional[Staff]:
        """Get a staff row locked against concurrent capacity writes (no-op on SQLite).

        populate_existing overwrites a copy already in the session, so the
        caller sees the status and capacity as of the lock.
        """
        return (
            db.query(Staff)
            .populate_existing()
            .filter(Staff.id == staff_id)
            .with_for_update()
            .first()
        )

    @staticmethod
    def get_eligible_staff(db: Session, staff_type: str) -> list[Staff]:
        """Available staff of one type, lowest id first"""
        return (
            db.query(Staff)
            .filter(Staff.service_type == staff_type, Staff.status == StaffStatus.AVAILABLE.value)
            .order_by(Staff.id)
            .all()
        )

    @staticmethod
    def create_staff(db: Session, **staff_data) -> Staff:
        staff = Staff(**staff_data)
        db.add(staff)
        db.flush()
        return staff

    @staticmethod
    def update_staff(db: Session, staff: Staff, **updates) -> Staff:
        """Update a staff member with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(staff, key):
                setattr(staff, key, value)
        db.flush()
        return staff

    @staticmethod
    def delete_staff(db: Session, staff: Staff) -> None:
        db.delete(staff)
        db.flush()
