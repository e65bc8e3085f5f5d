"""
Doctor Schemas
Pydantic models for doctor profile, dashboard and clinic endpoints
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


# ==================== PROFILE ====================

class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    profile_image_url: Optional[str] = Field(None, max_length=500)


class DoctorProfileUpdate(BaseModel):
    specialization: Optional[List[str]] = None
    custom_specializations: Optional[List[str]] = None
    qualification: Optional[str] = None
    registration_number: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, ge=0, le=80)
    consultation_fee: Optional[float] = Field(None, ge=0)
    bio: Optional[str] = None
    clinic_id: Optional[int] = None
    clinic_name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    languages: Optional[List[str]] = None


class ProfileUpdate(BaseModel):
    """Schema for a combined user and doctor profile update"""
    user_id: int
    user: Optional[UserProfileUpdate] = None
    doctor: Optional[DoctorProfileUpdate] = None


class ProfileResponse(BaseModel):
    success: bool = True
    user: Dict[str, Any]
    doctor: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


# ==================== DASHBOARD ====================

class MonthlyAppointments(BaseModel):
    month: str
    year: int
    count: int = 0


class WeeklyPatients(BaseModel):
    date: str
    patients: int = 0


class DashboardResponse(BaseModel):
    success: bool = True
    total_patients: int = 0
    today_appointments: int = 0
    pending_approvals: int = 0
    monthly_revenue: float = 0.0
    appointments_data: List[MonthlyAppointments] = Field(default_factory=list)
    patients_data: List[WeeklyPatients] = Field(default_factory=list)


# ==================== CLINICS ====================

class ClinicOut(BaseModel):
    id: int
    clinic_name: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    is_verified: bool = False


class ClinicListResponse(BaseModel):
    success: bool = True
    clinics: List[ClinicOut] = Field(default_factory=list)
