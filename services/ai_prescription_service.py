"""
AI Prescription Service
Drafts Ayurvedic prescriptions from a patient's record using Gemini
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import datetime, date, timedelta
from sqlalchemy.orm import Session
from sqlalchemy import desc

from database import get_db_context
from config import portal_config
import models
from services.llm_service import llm_service, LLMError
from services.adherence_service import adherence_service
from services.prescription_service import normalize_duration


logger = logging.getLogger(__name__)


class AIPrescriptionError(RuntimeError):
    """The model failed or returned something that is not a prescription"""


SYSTEM_PROMPT = (
    "You are Dr. Manas AI, an expert Ayurvedic physician assistant. You draft "
    "prescriptions for a licensed doctor to review. Patient safety comes first: "
    "never prescribe anything the patient is allergic to and always account for "
    "their current medications and chronic conditions."
)

PRESCRIPTION_SCHEMA = {
    "diagnosis": "Primary diagnosis",
    "symptoms": ["symptom"],
    "medicines": [
        {
            "name": "Medicine name",
            "dosage": "e.g. 1 tablet / 5g",
            "frequency": "e.g. twice daily after meals",
            "duration": "e.g. 15 days",
            "notes": "Special instructions",
        }
    ],
    "instructions": "General instructions",
    "dietAdvice": "Diet recommendations",
    "followUpDays": 7,
    "safetyNotes": "Contraindications and warnings considered",
}

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

FALLBACK_DIET_ADVICE = (
    "Eat warm, freshly cooked meals at regular times. Avoid cold, fried and "
    "processed food. Drink warm water through the day."
)

FALLBACK_LIFESTYLE_ADVICE = (
    "Sleep before 10 PM, wake early, and practise 20 minutes of yoga or "
    "pranayama daily."
)

# keywords -> regimen
FALLBACK_REGIMENS = [
    (
        ("digest", "stomach", "gas", "acidity", "bloat"),
        [
            {"name": "Triphala Churna", "dosage": "5g", "frequency": "Once daily at bedtime with warm water", "duration": "15 days"},
            {"name": "Hingwashtak Churna", "dosage": "3g", "frequency": "Twice daily before meals", "duration": "10 days"},
        ],
    ),
    (
        ("stress", "anxiety", "sleep", "insomnia"),
        [
            {"name": "Ashwagandha Churna", "dosage": "3g", "frequency": "Twice daily with warm milk", "duration": "30 days"},
            {"name": "Brahmi Vati", "dosage": "1 tablet", "frequency": "Twice daily after meals", "duration": "20 days"},
        ],
    ),
    (
        ("pain", "joint", "arthritis", "back"),
        [
            {"name": "Yogaraja Guggulu", "dosage": "2 tablets", "frequency": "Twice daily after meals", "duration": "30 days"},
            {"name": "Mahayograj Guggulu", "dosage": "1 tablet", "frequency": "Twice daily with warm water", "duration": "21 days"},
        ],
    ),
]

DEFAULT_REGIMEN = [
    {"name": "Chyawanprash", "dosage": "1 teaspoon", "frequency": "Once daily in the morning with warm milk", "duration": "30 days"},
    {"name": "Triphala Churna", "dosage": "5g", "frequency": "Once daily at bedtime with warm water", "duration": "15 days"},
]

FALLBACK_FOLLOW_UP_DAYS = 15


def _join(values: Optional[List[Any]], empty: str = "None reported") -> str:
    values = [str(v) for v in (values or []) if v]
    return ", ".join(values) if values else empty


def fallback_suggestion(diagnosis: Optional[str], symptoms: Optional[List[str]] = None) -> Dict[str, Any]:
    """Keyword-matched regimen used when the model is unavailable"""
    haystack = " ".join([diagnosis or ""] + list(symptoms or [])).lower()

    medicines = DEFAULT_REGIMEN
    for keywords, regimen in FALLBACK_REGIMENS:
        if any(keyword in haystack for keyword in keywords):
            medicines = regimen
            break

    return {
        "medicines": [dict(m) for m in medicines],
        "dietAdvice": FALLBACK_DIET_ADVICE,
        "lifestyleAdvice": FALLBACK_LIFESTYLE_ADVICE,
        "followUpDays": FALLBACK_FOLLOW_UP_DAYS,
        "fallback": True,
    }


def build_prescription_prompt(
    patient: models.Patient,
    appointment: Optional[models.Appointment],
    previous_prescriptions: List[models.Prescription],
    adherence_summary: str,
    today: date
) -> str:
    """Assemble the drafting prompt from the patient's record"""
    lines = [
        "Draft a prescription for the following patient.",
        "",
        "## Patient Profile",
        f"- Name: {patient.name}",
        f"- Age: {patient.age if patient.age is not None else 'Unknown'}",
        f"- Gender: {patient.gender or 'Unknown'}",
        f"- Blood group: {patient.blood_group or 'Unknown'}",
        f"- Location: {', '.join(p for p in [patient.city, patient.state, patient.country] if p) or 'Unknown'}",
        "",
        "## Critical Medical Information",
        f"- Allergies: {_join(patient.allergies)}",
        f"- Current medications: {_join(patient.current_medications)}",
        f"- Chronic conditions: {_join(patient.chronic_conditions)}",
        "",
        "## Current Visit",
    ]

    if appointment:
        lines.append(f"- Chief complaint: {appointment.chief_complaint or 'Not recorded'}")
        lines.append(f"- Reported symptoms: {_join(appointment.symptoms)}")
    else:
        lines.append("- No current appointment details")

    lines.extend(["", "## Previous Prescriptions (last 3 months)"])
    if previous_prescriptions:
        for prescription in previous_prescriptions:
            created = prescription.created_at.date().isoformat() if prescription.created_at else "unknown date"
            medicine_names = [m.get("name") for m in (prescription.medicines or [])]
            lines.append(f"- {created}: {prescription.diagnosis} ({_join(medicine_names, 'no medicines')})")
    else:
        lines.append("- None")

    lines.extend([
        "",
        "## Medication Adherence",
        f"- {adherence_summary}",
        "",
        "## Safety Guidelines",
        "1. Do not prescribe anything containing a listed allergen.",
        "2. Check for interactions with the current medications.",
        "3. Adjust for chronic conditions.",
        "4. Prefer remedies available in the patient's location.",
        "5. If adherence is poor, keep the regimen simple with fewer doses.",
        f"6. Consider the season: it is currently {MONTH_NAMES[today.month - 1]}.",
        "7. Prefer Ayurvedic medicines; if an allopathic medicine is necessary, say so in its notes.",
        "",
        "Durations must be written as '<number> days', '<number> weeks' or '<number> months'.",
    ])
    return "\n".join(lines)


class AIPrescriptionService:
    """
    Service for AI-assisted prescription drafting
    """

    def __init__(self, llm=None):
        self.llm = llm or llm_service

    def _load_context(
        self,
        session: Session,
        patient_id: int,
        appointment_id: Optional[int]
    ) -> Dict[str, Any]:
        patient = session.query(models.Patient).filter(
            models.Patient.id == patient_id
        ).first()
        if not patient:
            raise LookupError(f"Patient {patient_id} not found")

        appointment = None
        if appointment_id:
            appointment = session.query(models.Appointment).filter(
                models.Appointment.id == appointment_id
            ).first()

        since = datetime.utcnow() - timedelta(days=portal_config.AI_PREVIOUS_PRESCRIPTION_DAYS)
        previous = session.query(models.Prescription).filter(
            models.Prescription.patient_id == patient_id,
            models.Prescription.created_at >= since
        ).order_by(desc(models.Prescription.created_at)).limit(
            portal_config.AI_PREVIOUS_PRESCRIPTION_LIMIT
        ).all()

        records = session.query(models.MedicationAdherence).filter(
            models.MedicationAdherence.patient_id == patient_id
        ).order_by(desc(models.MedicationAdherence.scheduled_date)).limit(
            portal_config.AI_ADHERENCE_RECORD_LIMIT
        ).all()

        return {
            "patient": patient,
            "appointment": appointment,
            "previous_prescriptions": previous,
            "adherence_summary": adherence_service.describe_adherence(records),
        }

    async def generate_for_patient(
        self,
        patient_id: int,
        appointment_id: Optional[int] = None,
        today: Optional[date] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Draft a prescription for a patient

        Args:
            patient_id: Patient ID
            appointment_id: Appointment the draft is for, if any
            today: Date used for the season hint and follow-up date
            db: Database session

        Returns:
            Draft with diagnosis, symptoms, medicines (durations normalized),
            instructions, diet_advice, follow_up_date, safety_notes

        Raises:
            LookupError: Unknown patient
            AIPrescriptionError: Model unavailable or output unusable
        """
        today = today or date.today()

        def _prompt(session: Session) -> str:
            context = self._load_context(session, patient_id, appointment_id)
            return build_prescription_prompt(today=today, **context)

        if db:
            prompt = _prompt(db)
        else:
            with get_db_context() as session:
                prompt = _prompt(session)

        try:
            result = await self.llm.generate_json(
                prompt,
                schema_hint=PRESCRIPTION_SCHEMA,
                system_prompt=SYSTEM_PROMPT
            )
        except LLMError as e:
            logger.error(f"AI prescription generation failed for patient {patient_id}: {e}")
            raise AIPrescriptionError(str(e)) from e

        if not isinstance(result, dict) or not result.get("diagnosis") or not result.get("medicines"):
            logger.error(f"Unusable AI prescription for patient {patient_id}: {str(result)[:200]}")
            raise AIPrescriptionError("AI response did not contain a prescription")

        medicines = [
            {
                "name": m.get("name", ""),
                "dosage": m.get("dosage", ""),
                "frequency": m.get("frequency", ""),
                "duration": normalize_duration(m.get("duration")),
                "notes": m.get("notes", ""),
            }
            for m in result["medicines"]
            if isinstance(m, dict)
        ]

        try:
            follow_up_days = int(result.get("followUpDays") or portal_config.AI_DEFAULT_FOLLOW_UP_DAYS)
        except (TypeError, ValueError):
            follow_up_days = portal_config.AI_DEFAULT_FOLLOW_UP_DAYS

        logger.info(f"Drafted AI prescription for patient {patient_id} with {len(medicines)} medicines")

        return {
            "patient_id": patient_id,
            "appointment_id": appointment_id,
            "diagnosis": result["diagnosis"],
            "symptoms": list(result.get("symptoms") or []),
            "medicines": medicines,
            "instructions": result.get("instructions", ""),
            "diet_advice": result.get("dietAdvice", ""),
            "follow_up_date": (today + timedelta(days=follow_up_days)).isoformat(),
            "safety_notes": result.get("safetyNotes", ""),
            "ai_generated": True,
        }

    async def suggest_medicines(
        self,
        diagnosis: str,
        symptoms: Optional[List[str]] = None,
        age: Optional[int] = None,
        gender: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Quick medicine suggestions for a diagnosis

        Falls back to a keyword-matched regimen when the model is not
        configured, fails, or returns no medicines.
        """
        if not self.llm.is_configured:
            return fallback_suggestion(diagnosis, symptoms)

        prompt = (
            f"Suggest Ayurvedic medicines for a patient.\n"
            f"Diagnosis: {diagnosis}\n"
            f"Symptoms: {_join(symptoms)}\n"
            f"Age: {age if age is not None else 'Unknown'}\n"
            f"Gender: {gender or 'Unknown'}\n\n"
            "Return 2-4 medicines with dosage, frequency and duration, plus "
            "dietAdvice, lifestyleAdvice and followUpDays."
        )

        try:
            result = await self.llm.generate_json(prompt, system_prompt=SYSTEM_PROMPT)
        except LLMError as e:
            logger.warning(f"Suggestion model call failed, using fallback: {e}")
            return fallback_suggestion(diagnosis, symptoms)

        if not isinstance(result, dict) or not result.get("medicines"):
            return fallback_suggestion(diagnosis, symptoms)

        for medicine in result["medicines"]:
            if isinstance(medicine, dict):
                medicine["duration"] = normalize_duration(medicine.get("duration"))
        result["fallback"] = False
        return result


# Singleton instance
ai_prescription_service = AIPrescriptionService()
