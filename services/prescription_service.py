"""
Prescription Service
Prescription lifecycle: draft -> sent -> deleted, with AI duration cleanup
"""

import logging
import re
from typing import Dict, List, Optional, Any
from datetime import datetime, date
from sqlalchemy.orm import Session
from sqlalchemy import and_, desc

from database import get_db_context, run_detached
from config import portal_config
import models
from models import PrescriptionStatus

logger = logging.getLogger(__name__)

DURATION_UNITS = ("day", "week", "month", "year")

_CANONICAL_DURATION = re.compile(
    r"^\d+\s+(day|days|week|weeks|month|months|year|years)$", re.IGNORECASE
)
_DURATION_PATTERN = re.compile(r"(\d+)\s*(day|week|month|year)", re.IGNORECASE)

MEDICINE_FIELDS = ("name", "dosage", "frequency", "duration", "notes")


class PrescriptionError(Exception):
    """Base class for prescription lifecycle errors"""


class PrescriptionValidationError(PrescriptionError, ValueError):
    """Required prescription fields are missing"""


class PrescriptionNotFoundError(PrescriptionError, LookupError):
    """No prescription with the given id"""


class PrescriptionStateError(PrescriptionError):
    """Operation not allowed in the prescription's current state"""


def normalize_duration(duration: Optional[str]) -> str:
    """
    Reduce a free-text medicine duration to "<N> <unit>s"

    >>> normalize_duration("for about 2 weeks")
    '2 weeks'
    >>> normalize_duration("take until better")
    '7 days'
    """
    if not duration or not str(duration).strip():
        return portal_config.DEFAULT_DURATION

    text = str(duration).strip()
    if _CANONICAL_DURATION.match(text):
        return text

    match = _DURATION_PATTERN.search(text)
    if match:
        return f"{match.group(1)} {match.group(2).lower()}s"

    lowered = text.lower()
    for unit in DURATION_UNITS:
        if unit in lowered:
            return portal_config.UNIT_DEFAULT_DURATIONS[unit]

    return portal_config.DEFAULT_DURATION


def clean_medicines(
    medicines: Optional[List[Dict[str, Any]]],
    normalize: bool = False
) -> List[Dict[str, Any]]:
    """Keep known medicine fields in order; optionally normalize durations"""
    cleaned = []
    for medicine in medicines or []:
        entry = {key: medicine.get(key) for key in MEDICINE_FIELDS if key in medicine}
        if normalize:
            entry["duration"] = normalize_duration(medicine.get("duration"))
        cleaned.append(entry)
    return cleaned


def validate_content(diagnosis: Optional[str], medicines: Optional[List[Dict[str, Any]]]) -> None:
    """Raise PrescriptionValidationError unless diagnosis and medicines are usable"""
    if not diagnosis or not str(diagnosis).strip():
        raise PrescriptionValidationError("Diagnosis is required")
    if not medicines:
        raise PrescriptionValidationError("At least one medicine is required")
    for index, medicine in enumerate(medicines, start=1):
        if not str(medicine.get("name") or "").strip():
            raise PrescriptionValidationError(f"Medicine {index} is missing a name")
        if not str(medicine.get("dosage") or "").strip():
            raise PrescriptionValidationError(f"Medicine {index} is missing a dosage")


def prescription_to_dict(prescription: models.Prescription, include_patient: bool = False) -> Dict[str, Any]:
    """Serialize a prescription for API responses"""
    data = {
        "id": prescription.id,
        "patient_id": prescription.patient_id,
        "doctor_id": prescription.doctor_id,
        "appointment_id": prescription.appointment_id,
        "diagnosis": prescription.diagnosis,
        "symptoms": list(prescription.symptoms or []),
        "medicines": list(prescription.medicines or []),
        "instructions": prescription.instructions,
        "diet_advice": prescription.diet_advice,
        "follow_up_date": prescription.follow_up_date.isoformat() if prescription.follow_up_date else None,
        "ai_generated": bool(prescription.ai_generated),
        "is_active": bool(prescription.is_active),
        "sent_to_patient": bool(prescription.sent_to_patient),
        "sent_at": prescription.sent_at.isoformat() if prescription.sent_at else None,
        "status": prescription.status.value,
        "created_at": prescription.created_at.isoformat() if prescription.created_at else None,
        "updated_at": prescription.updated_at.isoformat() if prescription.updated_at else None,
    }
    if include_patient:
        data["patient"] = prescription.patient.display_info if prescription.patient else None
    return data


class PrescriptionService:
    """
    Service for prescription lifecycle operations

    Notification dispatch is not done here; routes schedule it after a
    successful create so it can never fail the write.
    """

    async def create_prescription(
        self,
        patient_id: int,
        doctor_id: int,
        diagnosis: str,
        medicines: List[Dict[str, Any]],
        symptoms: Optional[List[str]] = None,
        instructions: Optional[str] = None,
        diet_advice: Optional[str] = None,
        follow_up_date: Optional[date] = None,
        appointment_id: Optional[int] = None,
        ai_generated: bool = False,
        db: Optional[Session] = None
    ) -> models.Prescription:
        """
        Create a prescription in draft state

        Args:
            patient_id: Patient ID
            doctor_id: Prescribing doctor ID
            diagnosis: Diagnosis text (required)
            medicines: Ordered medicine entries; each needs name and dosage
            symptoms: Ordered symptom list
            instructions: General instructions
            diet_advice: Diet advice
            follow_up_date: Follow-up date
            appointment_id: Originating appointment
            ai_generated: Whether the content was drafted by the AI flow;
                durations of AI drafts are normalized
            db: Database session

        Returns:
            Created Prescription object

        Raises:
            PrescriptionValidationError: Missing required fields
        """
        if not patient_id or not doctor_id:
            raise PrescriptionValidationError("Patient and doctor are required")
        validate_content(diagnosis, medicines)

        def _create(session: Session) -> models.Prescription:
            prescription = models.Prescription(
                patient_id=patient_id,
                doctor_id=doctor_id,
                appointment_id=appointment_id,
                diagnosis=diagnosis.strip(),
                symptoms=list(symptoms or []),
                medicines=clean_medicines(medicines, normalize=ai_generated),
                instructions=instructions or None,
                diet_advice=diet_advice or None,
                follow_up_date=follow_up_date,
                ai_generated=ai_generated,
                is_active=True,
                sent_to_patient=False,
                sent_at=None
            )

            session.add(prescription)
            session.commit()
            session.refresh(prescription)

            logger.info(
                f"Created prescription {prescription.id} for patient {patient_id} "
                f"by doctor {doctor_id} ({len(prescription.medicines)} medicines)"
            )
            return prescription

        if db:
            return _create(db)

        return run_detached(_create)

    def _get_or_raise(self, session: Session, prescription_id: int) -> models.Prescription:
        prescription = session.query(models.Prescription).filter(
            models.Prescription.id == prescription_id
        ).first()
        if not prescription:
            raise PrescriptionNotFoundError(f"Prescription {prescription_id} not found")
        return prescription

    async def get_prescription(
        self,
        prescription_id: int,
        db: Optional[Session] = None
    ) -> models.Prescription:
        """Get an active prescription; deleted ones are treated as missing"""
        def _get(session: Session) -> models.Prescription:
            prescription = self._get_or_raise(session, prescription_id)
            if not prescription.is_active:
                raise PrescriptionNotFoundError(f"Prescription {prescription_id} not found")
            return prescription

        if db:
            return _get(db)

        return run_detached(_get)

    async def list_doctor_prescriptions(
        self,
        doctor_id: int,
        db: Optional[Session] = None
    ) -> List[models.Prescription]:
        """Active prescriptions written by a doctor, newest first"""
        def _list(session: Session) -> List[models.Prescription]:
            return session.query(models.Prescription).filter(
                and_(
                    models.Prescription.doctor_id == doctor_id,
                    models.Prescription.is_active == True
                )
            ).order_by(
                desc(models.Prescription.created_at),
                desc(models.Prescription.id)
            ).all()

        if db:
            return _list(db)

        return run_detached(_list)

    async def update_prescription(
        self,
        prescription_id: int,
        diagnosis: str,
        medicines: List[Dict[str, Any]],
        symptoms: Optional[List[str]] = None,
        instructions: Optional[str] = None,
        diet_advice: Optional[str] = None,
        follow_up_date: Optional[date] = None,
        db: Optional[Session] = None
    ) -> models.Prescription:
        """
        Replace the clinical content of a prescription

        Lifecycle flags are left alone. Omitted optional fields are cleared.

        Raises:
            PrescriptionValidationError: Missing required fields
            PrescriptionNotFoundError: Unknown prescription
            PrescriptionStateError: Prescription was deleted
        """
        validate_content(diagnosis, medicines)

        def _update(session: Session) -> models.Prescription:
            prescription = self._get_or_raise(session, prescription_id)
            if prescription.status == PrescriptionStatus.DELETED:
                raise PrescriptionStateError(f"Prescription {prescription_id} has been deleted")

            prescription.diagnosis = diagnosis.strip()
            prescription.symptoms = list(symptoms or [])
            prescription.medicines = clean_medicines(medicines)
            prescription.instructions = instructions or None
            prescription.diet_advice = diet_advice or None
            prescription.follow_up_date = follow_up_date
            prescription.updated_at = datetime.utcnow()

            session.commit()
            session.refresh(prescription)

            logger.info(f"Updated prescription {prescription_id}")
            return prescription

        if db:
            return _update(db)

        return run_detached(_update)

    async def send_to_patient(
        self,
        prescription_id: int,
        db: Optional[Session] = None
    ) -> models.Prescription:
        """
        Mark a prescription as sent and stamp sent_at

        Calling it again only refreshes sent_at.

        Raises:
            PrescriptionNotFoundError: Unknown prescription
            PrescriptionStateError: Prescription was deleted
        """
        def _send(session: Session) -> models.Prescription:
            prescription = self._get_or_raise(session, prescription_id)
            if prescription.status == PrescriptionStatus.DELETED:
                raise PrescriptionStateError(f"Prescription {prescription_id} has been deleted")

            already_sent = prescription.sent_to_patient
            now = datetime.utcnow()
            prescription.sent_to_patient = True
            prescription.sent_at = now
            prescription.updated_at = now

            session.commit()
            session.refresh(prescription)

            if already_sent:
                logger.info(f"Prescription {prescription_id} re-sent, sent_at refreshed")
            else:
                logger.info(f"Prescription {prescription_id} sent to patient {prescription.patient_id}")
            return prescription

        if db:
            return _send(db)

        return run_detached(_send)

    async def delete_prescription(
        self,
        prescription_id: int,
        db: Optional[Session] = None
    ) -> bool:
        """
        Soft delete a prescription

        Idempotent; unknown ids are not an error.

        Returns:
            True if a row was found
        """
        def _delete(session: Session) -> bool:
            prescription = session.query(models.Prescription).filter(
                models.Prescription.id == prescription_id
            ).first()
            if not prescription:
                logger.info(f"Delete requested for unknown prescription {prescription_id}")
                return False

            if prescription.is_active:
                prescription.is_active = False
                prescription.updated_at = datetime.utcnow()
                session.commit()
                logger.info(f"Prescription {prescription_id} deleted")
            return True

        if db:
            return _delete(db)

        with get_db_context() as session:
            return _delete(session)


# Singleton instance
prescription_service = PrescriptionService()
