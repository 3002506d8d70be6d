"""Tests for the capacity guard when assignments race each other or staff changes."""

import threading

from carequeue.domain.appointments.engine import AssignmentEngine
from carequeue.domain.staff.repository import StaffRepository
from carequeue.domain.staff.schemas import StaffUpdate
from carequeue.domain.staff.service import StaffService
from carequeue.models import Appointment, AppointmentStatus, Service, Staff, StaffStatus


def seed(sessions, daily_capacity=1):
    """Create one doctor and one doctor-only service, returning their ids"""
    session = sessions()
    try:
        doctor = Staff(
            name="Dr. Lee",
            service_type="DOCTOR",
            daily_capacity=daily_capacity,
            status=StaffStatus.AVAILABLE.value,
        )
        service = Service(name="General Checkup", duration="MIN_30", required_staff_type="DOCTOR")
        session.add_all([doctor, service])
        session.commit()
        return doctor.id, service.id
    finally:
        session.close()


def run_together(sessions, *jobs):
    """Run each job(session) on its own thread and session, started at the same moment"""
    barrier = threading.Barrier(len(jobs))
    errors = []

    def worker(job):
        session = sessions()
        try:
            barrier.wait()
            job(session)
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(job,)) for job in jobs]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []


class TestAutoAssignRetry:
    def test_full_candidate_falls_back_to_queue(self, db, at, make_staff, make_service, make_appointment, monkeypatch):
        doctor = make_staff(daily_capacity=1)
        service = make_service()
        make_appointment(service, at(9), staff=doctor)
        calls = []

        def stale_pick(self, service, day, exclude_appointment_id=None):
            calls.append(day)
            return doctor

        monkeypatch.setattr(AssignmentEngine, "find_available_staff", stale_pick)

        appointment = AssignmentEngine(db).request_assignment("John Roe", service.id, at(10))

        assert appointment.staff_id is None
        assert len(calls) == 2
        assert AssignmentEngine(db).compute_capacity(doctor.id, at(10).date()) == 1

    def test_candidate_on_leave_after_selection_is_skipped(self, db, at, make_staff, make_service, monkeypatch):
        doctor = make_staff()
        service = make_service()

        def pick_then_leave(self, service, day, exclude_appointment_id=None):
            # The row changes behind the session's cached copy
            self.db.query(Staff).filter(Staff.id == doctor.id).update(
                {"status": StaffStatus.ON_LEAVE.value}, synchronize_session=False
            )
            return doctor

        monkeypatch.setattr(AssignmentEngine, "find_available_staff", pick_then_leave)

        appointment = AssignmentEngine(db).request_assignment("John Roe", service.id, at(10))

        assert appointment.staff_id is None
        assert db.query(Appointment).filter(Appointment.staff_id == doctor.id).count() == 0


class TestLockedStaffRead:
    def test_lock_sees_change_committed_by_another_session(self, file_sessions):
        doctor_id, _ = seed(file_sessions)
        reader = file_sessions()
        writer = file_sessions()
        try:
            cached = StaffRepository.get_eligible_staff(reader, "DOCTOR")[0]
            assert cached.status == StaffStatus.AVAILABLE.value

            StaffService(writer).update_staff(doctor_id, StaffUpdate(status=StaffStatus.ON_LEAVE))

            locked = StaffRepository.get_staff_for_update(reader, doctor_id)
            assert locked is cached
            assert locked.status == StaffStatus.ON_LEAVE.value
        finally:
            reader.close()
            writer.close()


class TestThreadedAssignment:
    def test_two_bookings_for_the_last_slot(self, file_sessions, at):
        doctor_id, service_id = seed(file_sessions, daily_capacity=1)

        def book(session):
            AssignmentEngine(session).request_assignment("Jane Doe", service_id, at(9))

        run_together(file_sessions, book, book)

        session = file_sessions()
        try:
            appointments = session.query(Appointment).all()
            assert len(appointments) == 2
            assert sorted(a.staff_id is None for a in appointments) == [False, True]
            assert AssignmentEngine(session).compute_capacity(doctor_id, at(9).date()) == 1
        finally:
            session.close()

    def test_booking_racing_leave_never_lands_on_leave(self, file_sessions, at):
        doctor_id, service_id = seed(file_sessions, daily_capacity=3)

        def book(session):
            AssignmentEngine(session).request_assignment("Jane Doe", service_id, at(9))

        def go_on_leave(session):
            StaffService(session).update_staff(doctor_id, StaffUpdate(status=StaffStatus.ON_LEAVE))

        run_together(file_sessions, book, go_on_leave)

        session = file_sessions()
        try:
            assigned = (
                session.query(Appointment)
                .filter(
                    Appointment.staff_id == doctor_id,
                    Appointment.status == AppointmentStatus.SCHEDULED.value,
                )
                .count()
            )
            assert assigned == 0
            assert session.query(Appointment).count() == 1
        finally:
            session.close()
