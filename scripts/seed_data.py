#!/usr/bin/env python
"""
Seed Data
Script to seed the database with a demo doctor, patients, appointments,
prescriptions and dose adherence records for development
"""

import sys
import os
import argparse
import logging
import random
from datetime import datetime, timedelta, date
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session

from database import SessionLocal, engine, Base, DatabaseHealthCheck, reset_db
from models import (
    User, Clinic, Doctor, Patient, DoctorPatientRelationship,
    Appointment, Prescription, MedicationAdherence, UserRole, AppointmentStatus
)


logger = logging.getLogger(__name__)


DEMO_DOCTOR_EMAIL = "demo.doctor@vaidyaportal.in"

DEMO_PATIENTS = [
    {"name": "Aarav Sharma", "email": "aarav@example.in", "age": 42, "gender": "male",
     "allergies": ["Guggulu"], "chronic_conditions": ["Hypertension"], "city": "Pune"},
    {"name": "Meera Iyer", "email": "meera@example.in", "age": 35, "gender": "female",
     "allergies": [], "chronic_conditions": ["Hypothyroidism"], "city": "Chennai"},
    {"name": "Kabir Singh", "email": "kabir@example.in", "age": 58, "gender": "male",
     "allergies": [], "chronic_conditions": ["Type 2 Diabetes"], "city": "Jaipur"},
]

DEMO_MEDICINES = [
    {"name": "Triphala Churna", "dosage": "5g", "frequency": "Once daily at bedtime", "duration": "15 days"},
    {"name": "Ashwagandha Churna", "dosage": "3g", "frequency": "Twice daily with warm milk", "duration": "30 days"},
]

DOSE_TIMES = ["08:00", "20:00"]


def create_tables():
    """Create all database tables"""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")


def seed_doctor(db: Session) -> Doctor:
    """Create the demo doctor and clinic"""
    existing = db.query(User).filter(User.email == DEMO_DOCTOR_EMAIL).first()
    if existing and existing.doctor:
        logger.info("Demo doctor already exists")
        return existing.doctor

    clinic = Clinic(clinic_name="Vaidya Wellness Centre", city="Pune", state="Maharashtra", is_verified=True)
    user = User(name="Dr. Ananya Rao", email=DEMO_DOCTOR_EMAIL, phone="+919800000001",
                role=UserRole.DOCTOR, is_verified=True)
    db.add_all([clinic, user])
    db.flush()

    doctor = Doctor(
        user_id=user.id,
        clinic_id=clinic.id,
        specialization=["Kayachikitsa", "Panchakarma"],
        qualification="BAMS, MD (Ayurveda)",
        registration_number="MH-AYU-10234",
        years_of_experience=12,
        consultation_fee=500,
        languages=["English", "Hindi", "Marathi"],
        clinic_name=clinic.clinic_name,
        city="Pune",
        state="Maharashtra",
    )
    db.add(doctor)
    db.flush()
    logger.info(f"Created demo doctor {doctor.id}")
    return doctor


def seed_patients(db: Session, doctor: Doctor, today: date) -> List[Patient]:
    """Create demo patients, their relationships and appointments"""
    patients = []
    for index, data in enumerate(DEMO_PATIENTS):
        user = db.query(User).filter(User.email == data["email"]).first()
        if user and user.patient:
            patients.append(user.patient)
            continue

        user = User(name=data["name"], email=data["email"], role=UserRole.PATIENT)
        db.add(user)
        db.flush()

        patient = Patient(
            user_id=user.id,
            age=data["age"],
            gender=data["gender"],
            allergies=data["allergies"],
            chronic_conditions=data["chronic_conditions"],
            current_medications=[],
            city=data["city"],
            state="Maharashtra",
        )
        db.add(patient)
        db.flush()

        first_visit = today - timedelta(days=30 + index * 7)
        db.add(DoctorPatientRelationship(
            doctor_id=doctor.id,
            patient_id=patient.id,
            total_appointments=2,
            first_appointment_date=first_visit,
            last_appointment_date=today,
        ))
        db.add_all([
            Appointment(
                patient_id=patient.id, doctor_id=doctor.id, scheduled_date=first_visit,
                scheduled_time="10:00", status=AppointmentStatus.COMPLETED.value,
                chief_complaint="Low energy and poor digestion",
            ),
            Appointment(
                patient_id=patient.id, doctor_id=doctor.id, scheduled_date=today,
                scheduled_time=f"{11 + index}:00", status=AppointmentStatus.SCHEDULED.value,
                chief_complaint="Follow-up consultation",
            ),
        ])
        patients.append(patient)

    db.flush()
    logger.info(f"Seeded {len(patients)} patients")
    return patients


def seed_prescription_with_adherence(
    db: Session,
    doctor: Doctor,
    patient: Patient,
    today: date,
    days: int = 14,
    rng: Optional[random.Random] = None
) -> Prescription:
    """One sent prescription with twice-daily dose records for past days"""
    rng = rng or random.Random(42)
    start = today - timedelta(days=days)

    prescription = Prescription(
        patient_id=patient.id,
        doctor_id=doctor.id,
        diagnosis="Agnimandya (weak digestion)",
        symptoms=["bloating", "fatigue"],
        medicines=DEMO_MEDICINES,
        instructions="Take with warm water",
        diet_advice="Warm, light meals",
        follow_up_date=today + timedelta(days=7),
        is_active=True,
        sent_to_patient=True,
        sent_at=datetime.combine(start, datetime.min.time()),
    )
    db.add(prescription)
    db.flush()

    for offset in range(days):
        day = start + timedelta(days=offset)
        for medicine in DEMO_MEDICINES:
            for dose_time in DOSE_TIMES:
                roll = rng.random()
                hour, minute = (int(part) for part in dose_time.split(":"))
                moment = datetime.combine(day, datetime.min.time()).replace(hour=hour, minute=minute)
                db.add(MedicationAdherence(
                    prescription_id=prescription.id,
                    patient_id=patient.id,
                    medicine_name=medicine["name"],
                    scheduled_date=day,
                    scheduled_time=dose_time,
                    is_taken=roll < 0.8,
                    is_skipped=0.8 <= roll < 0.9,
                    taken_at=moment + timedelta(minutes=10) if roll < 0.8 else None,
                    skipped_at=moment if 0.8 <= roll < 0.9 else None,
                ))

    db.flush()
    logger.info(f"Seeded prescription {prescription.id} with {days * len(DEMO_MEDICINES) * len(DOSE_TIMES)} dose records")
    return prescription


def seed_all(db: Optional[Session] = None, today: Optional[date] = None) -> Doctor:
    """Seed everything and commit; closes the session only if it opened it"""
    today = today or date.today()
    owns_session = db is None
    db = db or SessionLocal()

    try:
        doctor = seed_doctor(db)
        patients = seed_patients(db, doctor, today)
        if patients and not patients[0].prescriptions:
            seed_prescription_with_adherence(db, doctor, patients[0], today)
        db.commit()
        logger.info(f"Demo doctor ID: {doctor.id}")
        return doctor
    except Exception as e:
        db.rollback()
        logger.error(f"Error during seeding: {e}")
        raise
    finally:
        if owns_session:
            db.close()


def main():
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(
        description="Seed the database with demo portal data"
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate all tables before seeding"
    )

    args = parser.parse_args()

    if args.reset:
        reset_db()
    else:
        create_tables()
    seed_all()
    for table, count in sorted(DatabaseHealthCheck.get_table_counts().items()):
        logger.info(f"{table}: {count} rows")


if __name__ == "__main__":
    main()
