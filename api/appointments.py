"""
Appointments API Router
Endpoints for the doctor's appointment queue and video calls
"""

from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_db, services, not_found, bad_request
from api.schemas.appointment import (
    AppointmentStatusUpdate,
    AppointmentListResponse,
    AppointmentResponse,
)


router = APIRouter(prefix="/doctor/appointments", tags=["appointments"])

calls_router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    doctor_id: int = Query(..., description="Doctor whose queue to list"),
    today: Optional[date] = Query(None, description="Override the reference date"),
    db: Session = Depends(get_db)
):
    """
    Appointments grouped into pending, confirmed, today, completed and cancelled
    """
    appointment_service = services.get_appointment_service()
    appointments = await appointment_service.list_for_doctor(doctor_id, today=today, db=db)
    return {"success": True, "appointments": appointments}


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    update: AppointmentStatusUpdate,
    db: Session = Depends(get_db)
):
    appointment_service = services.get_appointment_service()
    try:
        appointment = await appointment_service.update_status(appointment_id, update.status, db=db)
    except ValueError as e:
        raise bad_request(str(e))
    except LookupError as e:
        raise not_found(str(e))
    return {"success": True, "appointment": appointment, "message": "Appointment updated"}


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: int,
    db: Session = Depends(get_db)
):
    appointment_service = services.get_appointment_service()
    try:
        await appointment_service.delete(appointment_id, db=db)
    except LookupError as e:
        raise not_found(str(e))
    return {"success": True, "message": "Appointment deleted successfully"}


@calls_router.post("/{appointment_id}/start-call", response_model=AppointmentResponse)
async def start_call(
    appointment_id: int,
    db: Session = Depends(get_db)
):
    """Record the start of the video consultation; repeat calls are no-ops"""
    appointment_service = services.get_appointment_service()
    try:
        result = await appointment_service.start_call(appointment_id, db=db)
    except LookupError as e:
        raise not_found(str(e))

    message = "Call already started" if result["already_started"] else "Call started successfully"
    return {"success": True, "appointment": result["appointment"], "message": message}
