"""
Patients API Router
Endpoints for a doctor's patient list and patient details
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_db, services, not_found
from api.schemas.patient import PatientListResponse, PatientDetailResponse


router = APIRouter(prefix="/doctor/patients", tags=["patients"])


@router.get("", response_model=PatientListResponse)
async def list_patients(
    doctor_id: int = Query(..., description="Doctor whose patients to list"),
    db: Session = Depends(get_db)
):
    """
    Patients under active care of the doctor

    Includes appointment counts and each patient's adherence rate.
    """
    patient_service = services.get_patient_service()
    patients = await patient_service.list_for_doctor(doctor_id, db=db)
    return {"success": True, "patients": patients}


@router.get("/{patient_id}", response_model=PatientDetailResponse)
async def get_patient(
    patient_id: int,
    db: Session = Depends(get_db)
):
    patient_service = services.get_patient_service()
    try:
        detail = await patient_service.get_patient_detail(patient_id, db=db)
    except LookupError as e:
        raise not_found(str(e))
    return {"success": True, **detail}
