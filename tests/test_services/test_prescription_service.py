"""
Tests for Prescription Service
Tests duration normalization, validation and the draft/sent/deleted lifecycle
"""

import pytest
from datetime import date

from models import PrescriptionStatus
from services.prescription_service import (
    PrescriptionService,
    PrescriptionValidationError,
    PrescriptionNotFoundError,
    PrescriptionStateError,
    normalize_duration,
    clean_medicines,
    validate_content,
    prescription_to_dict,
)
from tests.factories import make_doctor, make_patient


@pytest.fixture
def prescription_service():
    return PrescriptionService()


# =============================================================================
# Duration Normalization
# =============================================================================

class TestNormalizeDuration:
    """Tests for free-text duration cleanup"""

    @pytest.mark.unit
    @pytest.mark.parametrize("raw,expected", [
        ("15 days", "15 days"),
        ("1 month", "1 month"),
        ("for about 2 weeks", "2 weeks"),
        ("3month", "3 months"),
        ("10 Days after food", "10 days"),
        ("a week or so", "2 weeks"),
        ("every day", "7 days"),
        ("until next month", "1 month"),
        ("take until better", "7 days"),
        ("", "7 days"),
        ("   ", "7 days"),
        (None, "7 days"),
    ])
    def test_examples(self, raw, expected):
        assert normalize_duration(raw) == expected

    @pytest.mark.unit
    def test_canonical_value_is_kept_verbatim(self):
        assert normalize_duration("2 Weeks") == "2 Weeks"

    @pytest.mark.unit
    def test_normalized_value_is_stable(self):
        once = normalize_duration("approximately 6 weeks")
        assert normalize_duration(once) == once


class TestCleanMedicines:

    @pytest.mark.unit
    def test_unknown_keys_dropped(self):
        cleaned = clean_medicines([{"name": "Brahmi Vati", "dosage": "1 tablet", "price": 120}])

        assert cleaned == [{"name": "Brahmi Vati", "dosage": "1 tablet"}]

    @pytest.mark.unit
    def test_normalize_fills_duration(self):
        cleaned = clean_medicines([{"name": "Brahmi Vati", "dosage": "1 tablet"}], normalize=True)

        assert cleaned[0]["duration"] == "7 days"

    @pytest.mark.unit
    def test_order_preserved(self):
        names = ["C", "A", "B"]
        cleaned = clean_medicines([{"name": n, "dosage": "1"} for n in names])

        assert [m["name"] for m in cleaned] == names


class TestValidateContent:

    @pytest.mark.unit
    def test_valid_content(self, sample_medicines):
        validate_content("Agnimandya", sample_medicines)

    @pytest.mark.unit
    @pytest.mark.parametrize("diagnosis", ["", "   ", None])
    def test_diagnosis_required(self, diagnosis, sample_medicines):
        with pytest.raises(PrescriptionValidationError, match="Diagnosis"):
            validate_content(diagnosis, sample_medicines)

    @pytest.mark.unit
    def test_medicines_required(self):
        with pytest.raises(PrescriptionValidationError, match="At least one medicine"):
            validate_content("Agnimandya", [])

    @pytest.mark.unit
    def test_medicine_name_required(self):
        with pytest.raises(PrescriptionValidationError, match="Medicine 2 is missing a name"):
            validate_content("Agnimandya", [{"name": "A", "dosage": "1"}, {"name": " ", "dosage": "1"}])

    @pytest.mark.unit
    def test_medicine_dosage_required(self):
        with pytest.raises(PrescriptionValidationError, match="missing a dosage"):
            validate_content("Agnimandya", [{"name": "Triphala Churna"}])

    @pytest.mark.unit
    def test_validation_error_is_value_error(self):
        assert issubclass(PrescriptionValidationError, ValueError)


# =============================================================================
# Lifecycle
# =============================================================================

class TestCreatePrescription:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_create_draft(self, prescription_service, db_session, test_doctor, test_patient, sample_medicines):
        prescription = await prescription_service.create_prescription(
            patient_id=test_patient.id,
            doctor_id=test_doctor.id,
            diagnosis="  Agnimandya  ",
            medicines=sample_medicines,
            symptoms=["bloating"],
            follow_up_date=date(2025, 2, 1),
            db=db_session
        )

        assert prescription.id is not None
        assert prescription.diagnosis == "Agnimandya"
        assert prescription.status == PrescriptionStatus.DRAFT
        assert prescription.is_active is True
        assert prescription.sent_to_patient is False
        assert prescription.sent_at is None
        assert [m["name"] for m in prescription.medicines] == ["Triphala Churna", "Hingwashtak Churna"]

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_ai_generated_durations_normalized(self, prescription_service, db_session, test_doctor, test_patient):
        prescription = await prescription_service.create_prescription(
            patient_id=test_patient.id,
            doctor_id=test_doctor.id,
            diagnosis="Anidra",
            medicines=[{"name": "Brahmi Vati", "dosage": "1 tablet", "duration": "about 3 weeks"}],
            ai_generated=True,
            db=db_session
        )

        assert prescription.ai_generated is True
        assert prescription.medicines[0]["duration"] == "3 weeks"

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_manual_durations_kept(self, prescription_service, db_session, test_doctor, test_patient):
        prescription = await prescription_service.create_prescription(
            patient_id=test_patient.id,
            doctor_id=test_doctor.id,
            diagnosis="Anidra",
            medicines=[{"name": "Brahmi Vati", "dosage": "1 tablet", "duration": "about 3 weeks"}],
            db=db_session
        )

        assert prescription.medicines[0]["duration"] == "about 3 weeks"

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_missing_diagnosis_rejected(self, prescription_service, db_session, test_doctor, test_patient, sample_medicines):
        with pytest.raises(PrescriptionValidationError):
            await prescription_service.create_prescription(
                patient_id=test_patient.id,
                doctor_id=test_doctor.id,
                diagnosis="",
                medicines=sample_medicines,
                db=db_session
            )

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_missing_doctor_rejected(self, prescription_service, db_session, test_patient, sample_medicines):
        with pytest.raises(PrescriptionValidationError, match="Patient and doctor"):
            await prescription_service.create_prescription(
                patient_id=test_patient.id,
                doctor_id=None,
                diagnosis="Agnimandya",
                medicines=sample_medicines,
                db=db_session
            )


class TestGetAndList:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_get_prescription(self, prescription_service, db_session, test_prescription):
        prescription = await prescription_service.get_prescription(test_prescription.id, db=db_session)

        assert prescription.id == test_prescription.id

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_get_unknown(self, prescription_service, db_session):
        with pytest.raises(PrescriptionNotFoundError):
            await prescription_service.get_prescription(9999, db=db_session)

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_get_deleted_is_not_found(self, prescription_service, db_session, test_prescription):
        await prescription_service.delete_prescription(test_prescription.id, db=db_session)

        with pytest.raises(PrescriptionNotFoundError):
            await prescription_service.get_prescription(test_prescription.id, db=db_session)

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_list_newest_first_without_deleted(
        self, prescription_service, db_session, test_doctor, test_patient, sample_medicines
    ):
        created = []
        for diagnosis in ["Agnimandya", "Anidra", "Sandhivata"]:
            created.append(await prescription_service.create_prescription(
                patient_id=test_patient.id,
                doctor_id=test_doctor.id,
                diagnosis=diagnosis,
                medicines=sample_medicines,
                db=db_session
            ))
        await prescription_service.delete_prescription(created[1].id, db=db_session)

        listed = await prescription_service.list_doctor_prescriptions(test_doctor.id, db=db_session)

        assert [p.diagnosis for p in listed] == ["Sandhivata", "Agnimandya"]

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_list_other_doctor_empty(self, prescription_service, db_session, test_prescription):
        listed = await prescription_service.list_doctor_prescriptions(test_prescription.doctor_id + 1, db=db_session)

        assert listed == []


class TestUpdatePrescription:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_update_replaces_content(self, prescription_service, db_session, test_prescription):
        updated = await prescription_service.update_prescription(
            test_prescription.id,
            diagnosis="Amlapitta",
            medicines=[{"name": "Avipattikar Churna", "dosage": "3g", "duration": "whenever needed"}],
            db=db_session
        )

        assert updated.diagnosis == "Amlapitta"
        assert updated.medicines == [{"name": "Avipattikar Churna", "dosage": "3g", "duration": "whenever needed"}]
        assert updated.instructions is None
        assert updated.symptoms == []
        assert updated.updated_at is not None

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_update_keeps_sent_state(self, prescription_service, db_session, test_prescription, sample_medicines):
        await prescription_service.send_to_patient(test_prescription.id, db=db_session)

        updated = await prescription_service.update_prescription(
            test_prescription.id, diagnosis="Amlapitta", medicines=sample_medicines, db=db_session
        )

        assert updated.status == PrescriptionStatus.SENT

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_update_deleted_rejected(self, prescription_service, db_session, test_prescription, sample_medicines):
        await prescription_service.delete_prescription(test_prescription.id, db=db_session)

        with pytest.raises(PrescriptionStateError):
            await prescription_service.update_prescription(
                test_prescription.id, diagnosis="Amlapitta", medicines=sample_medicines, db=db_session
            )

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_update_unknown(self, prescription_service, db_session, sample_medicines):
        with pytest.raises(PrescriptionNotFoundError):
            await prescription_service.update_prescription(
                9999, diagnosis="Amlapitta", medicines=sample_medicines, db=db_session
            )

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_update_invalid_content(self, prescription_service, db_session, test_prescription):
        with pytest.raises(PrescriptionValidationError):
            await prescription_service.update_prescription(
                test_prescription.id, diagnosis="Amlapitta", medicines=[], db=db_session
            )


class TestSendAndDelete:

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_send(self, prescription_service, db_session, test_prescription):
        sent = await prescription_service.send_to_patient(test_prescription.id, db=db_session)

        assert sent.sent_to_patient is True
        assert sent.sent_at is not None
        assert sent.status == PrescriptionStatus.SENT

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_resend_refreshes_timestamp(self, prescription_service, db_session, test_prescription):
        first = (await prescription_service.send_to_patient(test_prescription.id, db=db_session)).sent_at
        second = (await prescription_service.send_to_patient(test_prescription.id, db=db_session)).sent_at

        assert second >= first

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_send_deleted_rejected(self, prescription_service, db_session, test_prescription):
        await prescription_service.delete_prescription(test_prescription.id, db=db_session)

        with pytest.raises(PrescriptionStateError):
            await prescription_service.send_to_patient(test_prescription.id, db=db_session)

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_send_unknown(self, prescription_service, db_session):
        with pytest.raises(PrescriptionNotFoundError):
            await prescription_service.send_to_patient(9999, db=db_session)

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_delete_is_soft_and_idempotent(self, prescription_service, db_session, test_prescription):
        assert await prescription_service.delete_prescription(test_prescription.id, db=db_session) is True
        assert await prescription_service.delete_prescription(test_prescription.id, db=db_session) is True

        db_session.refresh(test_prescription)
        assert test_prescription.is_active is False
        assert test_prescription.status == PrescriptionStatus.DELETED

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_delete_unknown(self, prescription_service, db_session):
        assert await prescription_service.delete_prescription(9999, db=db_session) is False


class TestPrescriptionToDict:

    @pytest.mark.database
    def test_serialization(self, test_prescription):
        data = prescription_to_dict(test_prescription, include_patient=True)

        assert data["status"] == "draft"
        assert data["sent_at"] is None
        assert data["patient"]["name"] == "Aarav Sharma"
        assert data["medicines"][0]["name"] == "Triphala Churna"

    @pytest.mark.database
    def test_patient_omitted_by_default(self, test_prescription):
        assert "patient" not in prescription_to_dict(test_prescription)


class TestWithoutSession:
    """Service calls that open their own session return usable rows"""

    @pytest.fixture
    def store_ids(self, app_store):
        doctor = make_doctor(app_store, "Dr. Kavya Menon", "kavya.menon@example.in")
        patient = make_patient(app_store, "Rohan Das", "rohan.das@example.in")
        return doctor.id, patient.id

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_create_then_get(self, prescription_service, store_ids):
        doctor_id, patient_id = store_ids

        created = await prescription_service.create_prescription(
            patient_id=patient_id,
            doctor_id=doctor_id,
            diagnosis="Agnimandya",
            medicines=[{"name": "Chitrakadi Vati", "dosage": "500mg"}]
        )
        fetched = await prescription_service.get_prescription(created.id)

        assert created.id == fetched.id
        assert fetched.diagnosis == "Agnimandya"
        assert fetched.medicines[0]["name"] == "Chitrakadi Vati"
        assert prescription_to_dict(fetched)["status"] == "draft"

    @pytest.mark.asyncio
    @pytest.mark.database
    async def test_send_update_and_list(self, prescription_service, store_ids, sample_medicines):
        doctor_id, patient_id = store_ids
        created = await prescription_service.create_prescription(
            patient_id=patient_id,
            doctor_id=doctor_id,
            diagnosis="Anidra",
            medicines=sample_medicines
        )

        sent = await prescription_service.send_to_patient(created.id)
        updated = await prescription_service.update_prescription(
            created.id, diagnosis="Anidra with Vata excess", medicines=sample_medicines
        )
        listed = await prescription_service.list_doctor_prescriptions(doctor_id)

        assert sent.status == PrescriptionStatus.SENT
        assert updated.diagnosis == "Anidra with Vata excess"
        assert [p.id for p in listed] == [created.id]
        assert listed[0].sent_at is not None
