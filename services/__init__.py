"""
Services Module
Business logic layer for the VaidyaPortal application
"""

from services.llm_service import LLMService, llm_service
from services.adherence_service import AdherenceService, adherence_service
from services.prescription_service import PrescriptionService, prescription_service
from services.ai_prescription_service import AIPrescriptionService, ai_prescription_service
from services.appointment_service import AppointmentService, appointment_service
from services.patient_service import PatientService, patient_service
from services.dashboard_service import DashboardService, dashboard_service
from services.doctor_service import DoctorService, doctor_service


__all__ = [
    # Service classes
    "LLMService",
    "AdherenceService",
    "PrescriptionService",
    "AIPrescriptionService",
    "AppointmentService",
    "PatientService",
    "DashboardService",
    "DoctorService",
    # Singleton instances
    "llm_service",
    "adherence_service",
    "prescription_service",
    "ai_prescription_service",
    "appointment_service",
    "patient_service",
    "dashboard_service",
    "doctor_service",
]
