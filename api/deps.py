"""
API Dependencies
Common dependencies for FastAPI endpoints
"""

from fastapi import HTTPException, status

# Routers depend on database.get_db directly so a single override covers them
from database import get_db


def not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


class ServiceDependency:
    """
    Dependency injection for services
    """

    @staticmethod
    def get_adherence_service():
        from services.adherence_service import adherence_service
        return adherence_service

    @staticmethod
    def get_prescription_service():
        from services.prescription_service import prescription_service
        return prescription_service

    @staticmethod
    def get_ai_prescription_service():
        from services.ai_prescription_service import ai_prescription_service
        return ai_prescription_service

    @staticmethod
    def get_appointment_service():
        from services.appointment_service import appointment_service
        return appointment_service

    @staticmethod
    def get_patient_service():
        from services.patient_service import patient_service
        return patient_service

    @staticmethod
    def get_dashboard_service():
        from services.dashboard_service import dashboard_service
        return dashboard_service

    @staticmethod
    def get_doctor_service():
        from services.doctor_service import doctor_service
        return doctor_service

    @staticmethod
    def get_notification_service():
        from tools.notification_service import notification_service
        return notification_service

    @staticmethod
    def get_llm_service():
        from services.llm_service import llm_service
        return llm_service


# Service dependency instances
services = ServiceDependency()


__all__ = ["get_db", "not_found", "bad_request", "ServiceDependency", "services"]
