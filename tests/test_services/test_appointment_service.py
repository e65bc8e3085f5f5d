"""
Tests for Appointment Service
"""

import pytest
from datetime import date, timedelta

from models import Appointment, AppointmentStatus
from services.appointment_service import AppointmentService, categorize, CATEGORIES


TODAY = date(2025, 3, 10)


@pytest.fixture
def appointment_service():
    return AppointmentService()


@pytest.fixture
def booked(db_session, test_doctor, test_patient):
    """One appointment per interesting (date, status) combination"""
    rows = {
        "scheduled_today": (TODAY, "09:00", AppointmentStatus.SCHEDULED),
        "confirmed_today": (TODAY, "11:00", AppointmentStatus.CONFIRMED),
        "in_progress_today": (TODAY, "10:00", AppointmentStatus.IN_PROGRESS),
        "confirmed_later": (TODAY + timedelta(days=2), "10:00", AppointmentStatus.CONFIRMED),
        "scheduled_later": (TODAY + timedelta(days=1), "16:00", AppointmentStatus.SCHEDULED),
        "completed_past": (TODAY - timedelta(days=3), "12:00", AppointmentStatus.COMPLETED),
        "cancelled_today": (TODAY, "15:00", AppointmentStatus.CANCELLED),
    }
    created = {}
    for key, (day, time_slot, status) in rows.items():
        appointment = Appointment(
            patient_id=test_patient.id,
            doctor_id=test_doctor.id,
            scheduled_date=day,
            scheduled_time=time_slot,
            status=status.value,
            chief_complaint=key,
        )
        db_session.add(appointment)
        created[key] = appointment
    db_session.commit()
    return created


def complaints(items):
    return [item["chief_complaint"] for item in items]


class TestCategorize:

    @pytest.mark.unit
    def test_empty(self):
        assert categorize([], TODAY) == {category: [] for category in CATEGORIES}

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_buckets(self, appointment_service, db_session, test_doctor, booked):
        buckets = await appointment_service.list_for_doctor(test_doctor.id, today=TODAY, db=db_session)

        assert complaints(buckets["pending"]) == ["scheduled_today", "scheduled_later"]
        assert complaints(buckets["confirmed"]) == ["confirmed_later"]
        assert complaints(buckets["today"]) == ["scheduled_today", "in_progress_today", "confirmed_today"]
        assert complaints(buckets["completed"]) == ["completed_past"]
        assert complaints(buckets["cancelled"]) == ["cancelled_today"]

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_entries_carry_patient_info(self, appointment_service, db_session, test_doctor, booked):
        buckets = await appointment_service.list_for_doctor(test_doctor.id, today=TODAY, db=db_session)

        entry = buckets["completed"][0]
        assert entry["patient"]["name"] == "Aarav Sharma"
        assert entry["complaint_description"] == entry["chief_complaint"]
        assert entry["scheduled_date"] == (TODAY - timedelta(days=3)).isoformat()

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_other_doctor_sees_nothing(self, appointment_service, db_session, test_doctor, booked):
        buckets = await appointment_service.list_for_doctor(test_doctor.id + 1, today=TODAY, db=db_session)

        assert all(items == [] for items in buckets.values())


class TestUpdateStatus:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_update(self, appointment_service, db_session, test_appointment):
        updated = await appointment_service.update_status(test_appointment.id, "completed", db=db_session)

        assert updated["status"] == "completed"
        db_session.refresh(test_appointment)
        assert test_appointment.status == "completed"

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_invalid_status(self, appointment_service, db_session, test_appointment):
        with pytest.raises(ValueError, match="Invalid status"):
            await appointment_service.update_status(test_appointment.id, "approved", db=db_session)

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_unknown_appointment(self, appointment_service, db_session):
        with pytest.raises(LookupError):
            await appointment_service.update_status(9999, "confirmed", db=db_session)


class TestDelete:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_delete_removes_row(self, appointment_service, db_session, test_appointment):
        appointment_id = test_appointment.id

        assert await appointment_service.delete(appointment_id, db=db_session) is True
        assert db_session.query(Appointment).filter(Appointment.id == appointment_id).first() is None

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_delete_unknown(self, appointment_service, db_session):
        with pytest.raises(LookupError):
            await appointment_service.delete(9999, db=db_session)


class TestStartCall:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_first_start(self, appointment_service, db_session, test_appointment):
        result = await appointment_service.start_call(test_appointment.id, db=db_session)

        assert result["already_started"] is False
        assert result["appointment"]["status"] == "in_progress"
        assert result["appointment"]["call_started_at"] is not None

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_second_start_keeps_timestamp(self, appointment_service, db_session, test_appointment):
        first = await appointment_service.start_call(test_appointment.id, db=db_session)
        second = await appointment_service.start_call(test_appointment.id, db=db_session)

        assert second["already_started"] is True
        assert second["appointment"]["call_started_at"] == first["appointment"]["call_started_at"]

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_unknown_appointment(self, appointment_service, db_session):
        with pytest.raises(LookupError):
            await appointment_service.start_call(9999, db=db_session)
