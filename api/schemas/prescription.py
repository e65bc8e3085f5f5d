"""
Prescription Schemas
Pydantic models for prescription requests and responses

Clinical fields are Optional here; the prescription service validates them
and missing values surface as 400.
"""

from typing import Optional, List, Dict, Any
from datetime import date
from pydantic import BaseModel, Field


class MedicineEntry(BaseModel):
    """One prescribed medicine"""
    name: Optional[str] = None
    dosage: Optional[str] = None
    frequency: Optional[str] = None
    duration: Optional[str] = None
    notes: Optional[str] = None


class PrescriptionContent(BaseModel):
    """Clinical content shared by create and update"""
    diagnosis: Optional[str] = None
    symptoms: Optional[List[str]] = None
    medicines: Optional[List[MedicineEntry]] = None
    instructions: Optional[str] = None
    diet_advice: Optional[str] = None
    follow_up_date: Optional[date] = None

    def medicine_dicts(self) -> List[Dict[str, Any]]:
        return [m.model_dump(exclude_none=True) for m in (self.medicines or [])]


class PrescriptionCreate(PrescriptionContent):
    """Schema for creating a prescription"""
    patient_id: Optional[int] = None
    doctor_id: Optional[int] = None
    appointment_id: Optional[int] = None
    ai_generated: bool = False


class PrescriptionUpdate(PrescriptionContent):
    """Schema for replacing a prescription's content"""
    pass


class PrescriptionOut(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    diagnosis: str
    symptoms: List[str] = Field(default_factory=list)
    medicines: List[Dict[str, Any]] = Field(default_factory=list)
    instructions: Optional[str] = None
    diet_advice: Optional[str] = None
    follow_up_date: Optional[str] = None
    ai_generated: bool = False
    is_active: bool = True
    sent_to_patient: bool = False
    sent_at: Optional[str] = None
    status: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    patient: Optional[Dict[str, Any]] = None


class PrescriptionResponse(BaseModel):
    success: bool = True
    prescription: PrescriptionOut
    message: Optional[str] = None


class PrescriptionListResponse(BaseModel):
    success: bool = True
    prescriptions: List[PrescriptionOut] = Field(default_factory=list)
