"""
API Module
FastAPI routers for the VaidyaPortal application
"""

from config import settings
from api.adherence import router as adherence_router
from api.prescriptions import router as prescriptions_router
from api.ai import router as ai_router
from api.appointments import router as appointments_router, calls_router
from api.patients import router as patients_router
from api.doctors import router as doctors_router, clinics_router
from api.i18n import router as i18n_router

from api.deps import get_db, services


__all__ = [
    # Routers
    "adherence_router",
    "prescriptions_router",
    "ai_router",
    "appointments_router",
    "calls_router",
    "patients_router",
    "doctors_router",
    "clinics_router",
    "i18n_router",
    # Dependencies
    "get_db",
    "services",
]


def include_routers(app):
    """
    Include all API routers in the FastAPI app

    Usage:
        from api import include_routers
        include_routers(app)
    """
    prefix = settings.API_PREFIX
    app.include_router(adherence_router, prefix=prefix)
    app.include_router(prescriptions_router, prefix=prefix)
    app.include_router(ai_router, prefix=prefix)
    app.include_router(appointments_router, prefix=prefix)
    app.include_router(calls_router, prefix=prefix)
    app.include_router(patients_router, prefix=prefix)
    app.include_router(doctors_router, prefix=prefix)
    app.include_router(clinics_router, prefix=prefix)
    app.include_router(i18n_router, prefix=prefix)
