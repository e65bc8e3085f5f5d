"""
Doctors API Router
Endpoints for the doctor profile, dashboard and clinic directory
"""

from typing import Optional
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_db, services, not_found, bad_request
from api.schemas.doctor import (
    ProfileUpdate,
    ProfileResponse,
    DashboardResponse,
    ClinicListResponse,
)


router = APIRouter(prefix="/doctor", tags=["doctors"])

clinics_router = APIRouter(prefix="/clinics", tags=["clinics"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user_id: int = Query(..., description="User ID of the doctor"),
    db: Session = Depends(get_db)
):
    doctor_service = services.get_doctor_service()
    try:
        profile = await doctor_service.get_profile(user_id, db=db)
    except LookupError as e:
        raise not_found(str(e))
    return {"success": True, **profile}


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    update: ProfileUpdate,
    db: Session = Depends(get_db)
):
    """
    Update the user's name, phone and picture URL and the doctor's
    professional details; creates the doctor row on first save
    """
    doctor_service = services.get_doctor_service()
    try:
        profile = await doctor_service.update_profile(
            update.user_id,
            user_data=update.user.model_dump(exclude_unset=True) if update.user else None,
            doctor_data=update.doctor.model_dump(exclude_unset=True) if update.doctor else None,
            db=db
        )
    except LookupError as e:
        raise not_found(str(e))
    except ValueError as e:
        raise bad_request(str(e))
    return {"success": True, **profile, "message": "Profile updated successfully"}


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    doctor_id: int = Query(..., description="Doctor ID"),
    today: Optional[date] = Query(None, description="Override the reference date"),
    db: Session = Depends(get_db)
):
    dashboard_service = services.get_dashboard_service()
    stats = await dashboard_service.get_stats(doctor_id, today=today, db=db)
    return {"success": True, **stats}


@clinics_router.get("", response_model=ClinicListResponse)
async def list_clinics(db: Session = Depends(get_db)):
    doctor_service = services.get_doctor_service()
    clinics = await doctor_service.list_clinics(db=db)
    return {"success": True, "clinics": clinics}
