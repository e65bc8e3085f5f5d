"""
Patient Service
Business logic for a doctor's view of their patients
"""

import logging
from typing import Dict, List, Optional, Any
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc

from database import get_db_context
import models
from services.adherence_service import summarize_adherence


logger = logging.getLogger(__name__)


def patient_to_dict(patient: models.Patient) -> Dict[str, Any]:
    """Serialize a patient's profile with the owning user's contact info"""
    user = patient.user
    return {
        "id": patient.id,
        "user_id": patient.user_id,
        "date_of_birth": patient.date_of_birth.isoformat() if patient.date_of_birth else None,
        "age": patient.age,
        "gender": patient.gender,
        "blood_group": patient.blood_group,
        "allergies": list(patient.allergies or []),
        "chronic_conditions": list(patient.chronic_conditions or []),
        "current_medications": list(patient.current_medications or []),
        "city": patient.city,
        "state": patient.state,
        "country": patient.country,
        "user": {
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
            "profile_image_url": user.profile_image_url,
        } if user else None,
    }


class PatientService:
    """
    Service for patient-related operations
    """

    async def list_for_doctor(
        self,
        doctor_id: int,
        db: Optional[Session] = None
    ) -> List[Dict[str, Any]]:
        """
        Patients with an active relationship to the doctor

        Each entry carries the relationship's appointment stats and the
        patient's adherence rate across all of their prescriptions.
        """
        def _list(session: Session) -> List[Dict[str, Any]]:
            relationships = session.query(models.DoctorPatientRelationship).filter(
                and_(
                    models.DoctorPatientRelationship.doctor_id == doctor_id,
                    models.DoctorPatientRelationship.relationship_status == "active"
                )
            ).order_by(
                desc(models.DoctorPatientRelationship.last_appointment_date)
            ).all()

            patients = []
            for relationship in relationships:
                patient = relationship.patient
                if not patient:
                    continue

                records = session.query(models.MedicationAdherence).filter(
                    models.MedicationAdherence.patient_id == patient.id
                ).all()
                summary = summarize_adherence(records)

                entry = patient_to_dict(patient)
                entry.update({
                    "total_appointments": relationship.total_appointments or 0,
                    "first_appointment_date": (
                        relationship.first_appointment_date.isoformat()
                        if relationship.first_appointment_date else None
                    ),
                    "last_appointment_date": (
                        relationship.last_appointment_date.isoformat()
                        if relationship.last_appointment_date else None
                    ),
                    "adherence_rate": summary["adherence_rate"],
                    "total_doses": summary["total_doses"],
                })
                patients.append(entry)

            logger.debug(f"Doctor {doctor_id} has {len(patients)} active patients")
            return patients

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def get_patient_detail(
        self,
        patient_id: int,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Patient profile plus appointment history, newest first

        Raises:
            LookupError: Unknown patient
        """
        def _get(session: Session) -> Dict[str, Any]:
            patient = session.query(models.Patient).filter(
                models.Patient.id == patient_id
            ).first()
            if not patient:
                raise LookupError(f"Patient {patient_id} not found")

            appointments = session.query(models.Appointment).filter(
                models.Appointment.patient_id == patient_id
            ).order_by(
                desc(models.Appointment.scheduled_date),
                desc(models.Appointment.scheduled_time)
            ).all()

            return {
                "patient": patient_to_dict(patient),
                "appointments": [
                    {
                        "id": a.id,
                        "scheduled_date": a.scheduled_date.isoformat() if a.scheduled_date else None,
                        "scheduled_time": a.scheduled_time,
                        "mode": a.mode,
                        "status": a.status,
                        "chief_complaint": a.chief_complaint,
                        "duration_minutes": a.duration_minutes,
                    }
                    for a in appointments
                ],
            }

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)


# Singleton instance
patient_service = PatientService()
