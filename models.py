"""
Database Models
SQLAlchemy ORM models for VaidyaPortal
"""

from sqlalchemy import Column, Integer, String, Boolean, Float, DateTime, ForeignKey, Text, Date, Enum, Index, UniqueConstraint, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from enum import Enum as PyEnum

from database import Base
from config import TableNames


# ==================== ENUMS ====================

class UserRole(str, PyEnum):
    """Roles a portal user can hold"""
    DOCTOR = "doctor"
    PATIENT = "patient"
    CLINIC = "clinic"
    ADMIN = "admin"


class AppointmentStatus(str, PyEnum):
    """Lifecycle of a consultation appointment"""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PrescriptionStatus(str, PyEnum):
    """Derived lifecycle state of a prescription"""
    DRAFT = "draft"
    SENT = "sent"
    DELETED = "deleted"


# ==================== MODELS ====================

class User(Base):
    """Portal account; doctors and patients both hang off a user row"""
    __tablename__ = TableNames.USERS

    id = Column(Integer, primary_key=True, index=True)
    auth_id = Column(String(255), unique=True, index=True)  # identity provider subject

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), unique=True)
    profile_image_url = Column(String(500))
    role = Column(Enum(UserRole), default=UserRole.PATIENT, nullable=False)

    is_active = Column(Boolean, default=True)
    is_verified = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    doctor = relationship("Doctor", back_populates="user", uselist=False)
    patient = relationship("Patient", back_populates="user", uselist=False)


class Clinic(Base):
    """Clinic a doctor can practise from"""
    __tablename__ = TableNames.CLINICS

    id = Column(Integer, primary_key=True, index=True)
    clinic_name = Column(String(255), nullable=False)
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100), default="India")
    is_verified = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    doctors = relationship("Doctor", back_populates="clinic")


class Doctor(Base):
    """Practitioner profile"""
    __tablename__ = TableNames.DOCTORS

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    clinic_id = Column(Integer, ForeignKey("clinics.id"))

    # Professional info
    specialization = Column(JSON, default=list)
    custom_specializations = Column(JSON, default=list)
    qualification = Column(String(255))
    registration_number = Column(String(100))
    years_of_experience = Column(Integer)
    consultation_fee = Column(Float, default=0)
    bio = Column(Text)
    languages = Column(JSON, default=list)

    # Practice address
    clinic_name = Column(String(255))
    address_line1 = Column(String(255))
    address_line2 = Column(String(255))
    city = Column(String(100))
    state = Column(String(100))
    postal_code = Column(String(20))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="doctor")
    clinic = relationship("Clinic", back_populates="doctors")
    appointments = relationship("Appointment", back_populates="doctor")
    prescriptions = relationship("Prescription", back_populates="doctor")


class Patient(Base):
    """Patient medical profile"""
    __tablename__ = TableNames.PATIENTS

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    # Personal info
    date_of_birth = Column(Date)
    age = Column(Integer)
    gender = Column(String(20))
    blood_group = Column(String(5))

    # Medical info
    allergies = Column(JSON, default=list)
    chronic_conditions = Column(JSON, default=list)
    current_medications = Column(JSON, default=list)

    # Location (drives availability and seasonal advice in AI drafts)
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100), default="India")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="patient")
    appointments = relationship("Appointment", back_populates="patient")
    prescriptions = relationship("Prescription", back_populates="patient")
    adherence_records = relationship("MedicationAdherence", back_populates="patient")

    @property
    def name(self) -> str:
        return self.user.name if self.user else "Patient"

    @property
    def display_info(self) -> dict:
        user = self.user
        return {
            "pid": self.id,
            "name": user.name if user else None,
            "email": user.email if user else None,
            "phone": user.phone if user else None,
            "profile_image_url": user.profile_image_url if user else None,
        }


class DoctorPatientRelationship(Base):
    """Care relationship between a doctor and a patient"""
    __tablename__ = TableNames.DOCTOR_PATIENT_RELATIONSHIPS

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)

    relationship_status = Column(String(20), default="active")
    total_appointments = Column(Integer, default=0)
    first_appointment_date = Column(Date)
    last_appointment_date = Column(Date)

    created_at = Column(DateTime, default=datetime.utcnow)

    doctor = relationship("Doctor")
    patient = relationship("Patient")

    __table_args__ = (
        UniqueConstraint("doctor_id", "patient_id", name="uq_doctor_patient"),
    )


class Appointment(Base):
    """Consultation booking, in person or by video"""
    __tablename__ = TableNames.APPOINTMENTS

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)

    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(String(10))  # "10:30"
    duration_minutes = Column(Integer, default=30)
    mode = Column(String(20), default="video")  # "video", "in_person"
    status = Column(String(20), default=AppointmentStatus.SCHEDULED.value)

    chief_complaint = Column(Text)
    symptoms = Column(JSON, default=list)
    doctor_notes = Column(Text)

    call_started_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")

    __table_args__ = (
        Index("ix_appointments_doctor_date", "doctor_id", "scheduled_date"),
    )


class Prescription(Base):
    """Doctor-authored (or AI-drafted) prescription with lifecycle flags"""
    __tablename__ = TableNames.PRESCRIPTIONS

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    appointment_id = Column(Integer, ForeignKey("appointments.id"))

    # Clinical content
    diagnosis = Column(Text, nullable=False)
    symptoms = Column(JSON, default=list)
    medicines = Column(JSON, default=list)  # [{name, dosage, frequency, duration, notes}]
    instructions = Column(Text)
    diet_advice = Column(Text)
    follow_up_date = Column(Date)

    # Lifecycle
    ai_generated = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    sent_to_patient = Column(Boolean, default=False)
    sent_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = relationship("Patient", back_populates="prescriptions")
    doctor = relationship("Doctor", back_populates="prescriptions")
    adherence_records = relationship("MedicationAdherence", back_populates="prescription")

    __table_args__ = (
        Index("ix_prescriptions_doctor_active", "doctor_id", "is_active"),
    )

    @property
    def status(self) -> PrescriptionStatus:
        if not self.is_active:
            return PrescriptionStatus.DELETED
        if self.sent_to_patient:
            return PrescriptionStatus.SENT
        return PrescriptionStatus.DRAFT


class MedicationAdherence(Base):
    """One scheduled dose of one medicine under one prescription"""
    __tablename__ = TableNames.MEDICATION_ADHERENCE

    id = Column(Integer, primary_key=True, index=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)

    medicine_name = Column(String(255), nullable=False)
    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(String(10))

    # Neither flag set means the dose is pending
    is_taken = Column(Boolean, default=False)
    is_skipped = Column(Boolean, default=False)
    taken_at = Column(DateTime)
    skipped_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)

    prescription = relationship("Prescription", back_populates="adherence_records")
    patient = relationship("Patient", back_populates="adherence_records")

    __table_args__ = (
        Index("ix_adherence_prescription_date", "prescription_id", "scheduled_date"),
        Index("ix_adherence_patient_date", "patient_id", "scheduled_date"),
    )
