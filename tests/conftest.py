"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all VaidyaPortal tests.
Fixtures include database sessions, test clients, sample data, and mocks.
"""

import os
import sys
from datetime import date
from typing import Generator, List
from unittest.mock import MagicMock, patch

# Test environment must be in place before config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["GOOGLE_API_KEY"] = ""
os.environ.setdefault("NOTIFICATION_URL", "http://notifications.test/api/notifications/send")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, SessionLocal, build_engine, drop_db, get_db, init_db
from models import (
    User, Clinic, Doctor, Patient, DoctorPatientRelationship, Appointment,
    Prescription, MedicationAdherence, UserRole, AppointmentStatus
)
from app import app
from tests.factories import make_patient, make_adherence_records


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def app_store() -> Generator[Session, None, None]:
    """
    Session on the application's own engine, for code paths that open
    their own sessions. Tables are dropped afterwards.
    """
    init_db()
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        drop_db()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def notification_post():
    """Keep prescription notifications off the network"""
    response = MagicMock(status_code=200, text="ok")
    with patch("tools.notification_service.requests.post", return_value=response) as mock_post:
        yield mock_post


# ==================== SAMPLE DATA FIXTURES ====================

@pytest.fixture
def test_clinic(db_session: Session) -> Clinic:
    clinic = Clinic(clinic_name="Shanti Ayurveda", city="Pune", state="Maharashtra", is_verified=True)
    db_session.add(clinic)
    db_session.commit()
    db_session.refresh(clinic)
    return clinic


@pytest.fixture
def test_doctor(db_session: Session, test_clinic: Clinic) -> Doctor:
    """Create and return a doctor with a user row"""
    user = User(
        name="Dr. Ananya Rao",
        email="ananya.rao@example.in",
        phone="+919800000001",
        role=UserRole.DOCTOR,
        profile_image_url="https://img.example.in/ananya.png",
    )
    db_session.add(user)
    db_session.commit()

    doctor = Doctor(
        user_id=user.id,
        clinic_id=test_clinic.id,
        specialization=["Kayachikitsa"],
        qualification="BAMS",
        years_of_experience=10,
        consultation_fee=500,
        languages=["English", "Hindi"],
    )
    db_session.add(doctor)
    db_session.commit()
    db_session.refresh(doctor)
    return doctor


@pytest.fixture
def test_patient(db_session: Session) -> Patient:
    """Create and return a patient with a user row"""
    return make_patient(
        db_session,
        "Aarav Sharma",
        "aarav.sharma@example.in",
        phone="+919800000002",
        age=42,
        gender="male",
        blood_group="B+",
        allergies=["Guggulu"],
        chronic_conditions=["Hypertension"],
        current_medications=["Amlodipine 5mg"],
        city="Pune",
        state="Maharashtra",
    )


@pytest.fixture
def second_patient(db_session: Session) -> Patient:
    return make_patient(db_session, "Meera Iyer", "meera.iyer@example.in", age=35, gender="female")


@pytest.fixture
def test_appointment(db_session: Session, test_doctor: Doctor, test_patient: Patient) -> Appointment:
    appointment = Appointment(
        patient_id=test_patient.id,
        doctor_id=test_doctor.id,
        scheduled_date=date.today(),
        scheduled_time="10:30",
        status=AppointmentStatus.CONFIRMED.value,
        chief_complaint="Bloating after meals",
        symptoms=["bloating", "gas"],
    )
    db_session.add(appointment)
    db_session.commit()
    db_session.refresh(appointment)
    return appointment


@pytest.fixture
def sample_medicines() -> List[dict]:
    return [
        {"name": "Triphala Churna", "dosage": "5g", "frequency": "Once daily at bedtime", "duration": "15 days"},
        {"name": "Hingwashtak Churna", "dosage": "3g", "frequency": "Twice daily before meals", "duration": "10 days"},
    ]


@pytest.fixture
def test_prescription(
    db_session: Session,
    test_doctor: Doctor,
    test_patient: Patient,
    sample_medicines: List[dict]
) -> Prescription:
    prescription = Prescription(
        patient_id=test_patient.id,
        doctor_id=test_doctor.id,
        diagnosis="Agnimandya",
        symptoms=["bloating"],
        medicines=sample_medicines,
        instructions="Take with warm water",
    )
    db_session.add(prescription)
    db_session.commit()
    db_session.refresh(prescription)
    return prescription


@pytest.fixture
def adherence_records(db_session: Session, test_prescription: Prescription) -> List[MedicationAdherence]:
    """20 dose records: 15 taken, 3 skipped, 2 pending"""
    records = make_adherence_records(test_prescription, taken=15, skipped=3, pending=2)
    db_session.add_all(records)
    db_session.commit()
    return records


@pytest.fixture
def active_relationship(db_session: Session, test_doctor: Doctor, test_patient: Patient) -> DoctorPatientRelationship:
    relationship = DoctorPatientRelationship(
        doctor_id=test_doctor.id,
        patient_id=test_patient.id,
        total_appointments=3,
        first_appointment_date=date(2025, 1, 10),
        last_appointment_date=date(2025, 3, 5),
    )
    db_session.add(relationship)
    db_session.commit()
    db_session.refresh(relationship)
    return relationship


# ==================== LLM FIXTURES ====================

@pytest.fixture
def mock_llm():
    """Stand-in LLM client for the AI prescription service"""
    llm = MagicMock()
    llm.is_configured = True
    return llm


# ==================== MARKERS ====================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "database: mark test as requiring database")
