"""
Prescriptions API Router
Endpoints for the prescription lifecycle
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from api.deps import get_db, services, not_found, bad_request
from api.schemas.prescription import (
    PrescriptionCreate,
    PrescriptionUpdate,
    PrescriptionResponse,
    PrescriptionListResponse,
)
from services.prescription_service import (
    PrescriptionValidationError,
    PrescriptionNotFoundError,
    PrescriptionStateError,
    prescription_to_dict,
)


router = APIRouter(prefix="/doctor/prescriptions", tags=["prescriptions"])


def _conflict(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message)


@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription(
    payload: PrescriptionCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    """
    Create a draft prescription

    The prescription_created notification is dispatched after the response
    and cannot fail the request.
    """
    prescription_service = services.get_prescription_service()

    try:
        prescription = await prescription_service.create_prescription(
            patient_id=payload.patient_id,
            doctor_id=payload.doctor_id,
            diagnosis=payload.diagnosis,
            medicines=payload.medicine_dicts(),
            symptoms=payload.symptoms,
            instructions=payload.instructions,
            diet_advice=payload.diet_advice,
            follow_up_date=payload.follow_up_date,
            appointment_id=payload.appointment_id,
            ai_generated=payload.ai_generated,
            db=db
        )
    except PrescriptionValidationError as e:
        raise bad_request(str(e))

    notification_service = services.get_notification_service()
    background_tasks.add_task(
        notification_service.send_prescription_created,
        patient_id=prescription.patient_id,
        doctor_id=prescription.doctor_id,
        diagnosis=prescription.diagnosis,
        medicines=list(prescription.medicines or []),
        instructions=prescription.instructions,
    )

    return {
        "success": True,
        "prescription": prescription_to_dict(prescription, include_patient=True),
        "message": "Prescription created successfully",
    }


@router.get("", response_model=PrescriptionListResponse)
async def list_prescriptions(
    doctor_id: int = Query(..., description="Prescribing doctor"),
    db: Session = Depends(get_db)
):
    """Active prescriptions of a doctor, newest first"""
    prescription_service = services.get_prescription_service()
    prescriptions = await prescription_service.list_doctor_prescriptions(doctor_id, db=db)
    return {
        "success": True,
        "prescriptions": [prescription_to_dict(p, include_patient=True) for p in prescriptions],
    }


@router.get("/{prescription_id}", response_model=PrescriptionResponse)
async def get_prescription(
    prescription_id: int,
    db: Session = Depends(get_db)
):
    prescription_service = services.get_prescription_service()
    try:
        prescription = await prescription_service.get_prescription(prescription_id, db=db)
    except PrescriptionNotFoundError as e:
        raise not_found(str(e))
    return {"success": True, "prescription": prescription_to_dict(prescription, include_patient=True)}


@router.patch("/{prescription_id}", response_model=PrescriptionResponse)
async def update_prescription(
    prescription_id: int,
    payload: PrescriptionUpdate,
    db: Session = Depends(get_db)
):
    """Replace diagnosis, symptoms, medicines, instructions, diet advice and follow-up"""
    prescription_service = services.get_prescription_service()
    try:
        prescription = await prescription_service.update_prescription(
            prescription_id,
            diagnosis=payload.diagnosis,
            medicines=payload.medicine_dicts(),
            symptoms=payload.symptoms,
            instructions=payload.instructions,
            diet_advice=payload.diet_advice,
            follow_up_date=payload.follow_up_date,
            db=db
        )
    except PrescriptionValidationError as e:
        raise bad_request(str(e))
    except PrescriptionNotFoundError as e:
        raise not_found(str(e))
    except PrescriptionStateError as e:
        raise _conflict(str(e))

    return {
        "success": True,
        "prescription": prescription_to_dict(prescription, include_patient=True),
        "message": "Prescription updated successfully",
    }


@router.post("/{prescription_id}/send", response_model=PrescriptionResponse)
async def send_prescription(
    prescription_id: int,
    db: Session = Depends(get_db)
):
    """Mark a prescription as sent to the patient"""
    prescription_service = services.get_prescription_service()
    try:
        prescription = await prescription_service.send_to_patient(prescription_id, db=db)
    except PrescriptionNotFoundError as e:
        raise not_found(str(e))
    except PrescriptionStateError as e:
        raise _conflict(str(e))

    return {
        "success": True,
        "prescription": prescription_to_dict(prescription, include_patient=True),
        "message": "Prescription sent to patient",
    }


@router.delete("/{prescription_id}")
async def delete_prescription(
    prescription_id: int,
    db: Session = Depends(get_db)
):
    """Soft delete; succeeds for already deleted and unknown ids"""
    prescription_service = services.get_prescription_service()
    await prescription_service.delete_prescription(prescription_id, db=db)
    return {"success": True, "message": "Prescription deleted successfully"}
