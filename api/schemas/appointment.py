"""
Appointment Schemas
Pydantic models for appointment requests and responses
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


class AppointmentStatusUpdate(BaseModel):
    """Schema for changing an appointment's status"""
    status: str = Field(..., min_length=1, max_length=20)


class AppointmentOut(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    duration_minutes: Optional[int] = None
    mode: Optional[str] = None
    status: str
    chief_complaint: Optional[str] = None
    complaint_description: Optional[str] = None
    symptoms: List[str] = Field(default_factory=list)
    doctor_notes: Optional[str] = None
    call_started_at: Optional[str] = None
    patient: Optional[Dict[str, Any]] = None


class AppointmentCategories(BaseModel):
    pending: List[AppointmentOut] = Field(default_factory=list)
    confirmed: List[AppointmentOut] = Field(default_factory=list)
    today: List[AppointmentOut] = Field(default_factory=list)
    completed: List[AppointmentOut] = Field(default_factory=list)
    cancelled: List[AppointmentOut] = Field(default_factory=list)


class AppointmentListResponse(BaseModel):
    success: bool = True
    appointments: AppointmentCategories


class AppointmentResponse(BaseModel):
    success: bool = True
    appointment: AppointmentOut
    message: Optional[str] = None
