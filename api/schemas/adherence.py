"""
Adherence Schemas
Pydantic models for adherence progress responses
"""

from typing import Optional, List
from pydantic import BaseModel, Field


class DailyAdherence(BaseModel):
    """Dose outcomes for one scheduled date"""
    date: Optional[str] = None
    taken: int = 0
    skipped: int = 0
    pending: int = 0


class MedicineAdherence(BaseModel):
    """Dose outcomes for one medicine"""
    medicine_name: str
    total: int = 0
    taken: int = 0
    skipped: int = 0
    pending: int = 0
    adherence_rate: float = 0.0


class AdherenceActivity(BaseModel):
    """A taken or skipped dose"""
    id: Optional[int] = None
    prescription_id: Optional[int] = None
    patient_id: Optional[int] = None
    medicine_name: str
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    is_taken: bool = False
    is_skipped: bool = False
    taken_at: Optional[str] = None
    skipped_at: Optional[str] = None


class PatientInfo(BaseModel):
    """Patient contact details shown beside a prescription"""
    pid: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None


class AdherenceStats(BaseModel):
    """Adherence summary of one prescription"""
    total_doses: int = 0
    taken: int = 0
    skipped: int = 0
    pending: int = 0
    adherence_rate: float = Field(0.0, ge=0, le=100)
    daily_breakdown: List[DailyAdherence] = Field(default_factory=list)
    medicine_breakdown: List[MedicineAdherence] = Field(default_factory=list)
    recent_activity: List[AdherenceActivity] = Field(default_factory=list)
    patient: Optional[PatientInfo] = None


class AdherenceStatsResponse(BaseModel):
    success: bool = True
    stats: AdherenceStats
