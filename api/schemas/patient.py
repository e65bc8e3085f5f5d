"""
Patient Schemas
Pydantic models for the doctor's patient views
"""

from typing import Optional, List, Any
from pydantic import BaseModel, Field


class PatientUser(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None


class PatientOut(BaseModel):
    """Patient medical profile"""
    id: int
    user_id: int
    date_of_birth: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    allergies: List[Any] = Field(default_factory=list)
    chronic_conditions: List[Any] = Field(default_factory=list)
    current_medications: List[Any] = Field(default_factory=list)
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    user: Optional[PatientUser] = None


class PatientSummary(PatientOut):
    """Patient row in a doctor's patient list"""
    total_appointments: int = 0
    first_appointment_date: Optional[str] = None
    last_appointment_date: Optional[str] = None
    adherence_rate: float = 0.0
    total_doses: int = 0


class PatientListResponse(BaseModel):
    success: bool = True
    patients: List[PatientSummary] = Field(default_factory=list)


class AppointmentHistoryEntry(BaseModel):
    id: int
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    mode: Optional[str] = None
    status: Optional[str] = None
    chief_complaint: Optional[str] = None
    duration_minutes: Optional[int] = None


class PatientDetailResponse(BaseModel):
    success: bool = True
    patient: PatientOut
    appointments: List[AppointmentHistoryEntry] = Field(default_factory=list)
