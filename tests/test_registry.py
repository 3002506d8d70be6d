"""Tests for staff registry and service catalog changes that affect assignments."""

from unittest.mock import patch

import pytest

from carequeue.domain.catalog.schemas import ServiceCreate, ServiceUpdate
from carequeue.domain.catalog.service import CatalogService
from carequeue.domain.staff.schemas import StaffCreate, StaffUpdate
from carequeue.domain.staff.service import StaffService
from carequeue.exceptions import ConflictError, NotFoundError, ValidationError
from carequeue.models import ActivityLog, Appointment, AppointmentStatus, Staff


class TestStaffRegistry:
    def test_create_uses_defaults(self, db):
        staff = StaffService(db).create_staff(StaffCreate(name="Dr. Lee", serviceType="DOCTOR"))

        assert staff.id is not None
        assert staff.daily_capacity == 5
        assert staff.status == "AVAILABLE"

    def test_create_rejects_short_name(self):
        with pytest.raises(ValueError):
            StaffCreate(name="A", serviceType="DOCTOR")

    def test_create_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            StaffCreate(name="Dr. Lee", serviceType="DOCTOR", dailyCapacity=0)

    def test_get_unknown_staff(self, db):
        with pytest.raises(NotFoundError):
            StaffService(db).get_staff(99)

    def test_update_rejects_null_fields(self, db, make_staff):
        staff = make_staff()
        with pytest.raises(ValidationError):
            StaffService(db).update_staff(staff.id, StaffUpdate(dailyCapacity=None))

    def test_going_on_leave_requeues_scheduled(self, db, at, make_staff, make_service, make_appointment):
        doctor = make_staff()
        service = make_service()
        scheduled = make_appointment(service, at(9), staff=doctor)
        completed = make_appointment(service, at(10), staff=doctor, status=AppointmentStatus.COMPLETED.value)

        StaffService(db).update_staff(doctor.id, StaffUpdate(status="ON_LEAVE"))

        db.refresh(scheduled)
        db.refresh(completed)
        assert scheduled.staff_id is None
        assert completed.staff_id == doctor.id

    def test_lower_capacity_requeues_latest_surplus(self, db, at, make_staff, make_service, make_appointment):
        doctor = make_staff(daily_capacity=3)
        service = make_service()
        first = make_appointment(service, at(9), staff=doctor)
        second = make_appointment(service, at(10), staff=doctor)
        third = make_appointment(service, at(11), staff=doctor)

        StaffService(db).update_staff(doctor.id, StaffUpdate(dailyCapacity=1))

        for appointment in (first, second, third):
            db.refresh(appointment)
        assert first.staff_id == doctor.id
        assert second.staff_id is None
        assert third.staff_id is None

    def test_type_change_requeues_mismatches(self, db, at, make_staff, make_service, make_appointment):
        doctor = make_staff()
        service = make_service(required_staff_type="DOCTOR")
        appointment = make_appointment(service, at(9), staff=doctor)

        StaffService(db).update_staff(doctor.id, StaffUpdate(serviceType="CONSULTANT"))

        db.refresh(appointment)
        assert appointment.staff_id is None

    def test_delete_requeues_and_removes(self, db, at, make_staff, make_service, make_appointment):
        doctor = make_staff()
        service = make_service()
        appointment = make_appointment(service, at(9), staff=doctor)

        result = StaffService(db).delete_staff(doctor.id)

        assert result["requeued"] == 1
        assert db.query(Staff).count() == 0
        db.refresh(appointment)
        assert appointment.staff_id is None
        assert appointment.status == AppointmentStatus.SCHEDULED.value

    def test_changes_are_logged(self, db):
        StaffService(db).create_staff(StaffCreate(name="Dr. Lee", serviceType="DOCTOR"))
        messages = [entry.message for entry in db.query(ActivityLog).all()]
        assert "Staff Dr. Lee added (DOCTOR)" in messages


class TestServiceCatalog:
    def test_create_and_list(self, db):
        catalog = CatalogService(db)
        catalog.create_service(
            ServiceCreate(name="Checkup", duration="MIN_30", requiredStaffType="DOCTOR")
        )
        services = catalog.get_services()
        assert [s.name for s in services] == ["Checkup"]

    def test_invalid_duration(self):
        with pytest.raises(ValueError):
            ServiceCreate(name="Checkup", duration="MIN_45", requiredStaffType="DOCTOR")

    def test_required_type_change_requeues(self, db, at, make_staff, make_service, make_appointment):
        doctor = make_staff()
        service = make_service()
        appointment = make_appointment(service, at(9), staff=doctor)

        CatalogService(db).update_service(service.id, ServiceUpdate(requiredStaffType="CONSULTANT"))

        db.refresh(appointment)
        assert appointment.staff_id is None

    def test_rename_keeps_assignments(self, db, at, make_staff, make_service, make_appointment):
        doctor = make_staff()
        service = make_service()
        appointment = make_appointment(service, at(9), staff=doctor)

        updated = CatalogService(db).update_service(service.id, ServiceUpdate(name="Full Checkup"))

        db.refresh(appointment)
        assert updated.name == "Full Checkup"
        assert appointment.staff_id == doctor.id

    def test_delete_in_use_is_rejected(self, db, at, make_service, make_appointment):
        service = make_service()
        make_appointment(service, at(9))

        with pytest.raises(ConflictError):
            CatalogService(db).delete_service(service.id)

    def test_delete_unused(self, db, make_service):
        service = make_service()
        assert CatalogService(db).delete_service(service.id) == {"message": "Service deleted"}
        assert db.query(Appointment).count() == 0
        with pytest.raises(NotFoundError):
            CatalogService(db).get_service(service.id)

    def test_every_write_invalidates_dashboard_cache(self, db):
        catalog = CatalogService(db)
        with patch("carequeue.domain.catalog.service.invalidate_dashboard_cache") as mock_invalidate:
            service = catalog.create_service(
                ServiceCreate(name="Checkup", duration="MIN_30", requiredStaffType="DOCTOR")
            )
            catalog.update_service(service.id, ServiceUpdate(duration="MIN_60"))
            catalog.delete_service(service.id)

        assert mock_invalidate.call_count == 3
