"""
AI Schemas
Pydantic models for AI prescription drafting
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


class GeneratePrescriptionRequest(BaseModel):
    """Schema for drafting a prescription from a patient's record"""
    patient_id: int
    appointment_id: Optional[int] = None


class PrescriptionDraft(BaseModel):
    patient_id: int
    appointment_id: Optional[int] = None
    diagnosis: str
    symptoms: List[str] = Field(default_factory=list)
    medicines: List[Dict[str, Any]] = Field(default_factory=list)
    instructions: Optional[str] = None
    diet_advice: Optional[str] = None
    follow_up_date: Optional[str] = None
    safety_notes: Optional[str] = None
    ai_generated: bool = True


class GeneratePrescriptionResponse(BaseModel):
    success: bool = True
    prescription: PrescriptionDraft


class SuggestionRequest(BaseModel):
    """Schema for quick medicine suggestions"""
    diagnosis: str = Field(..., min_length=1)
    symptoms: Optional[List[str]] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    gender: Optional[str] = None


class SuggestionResponse(BaseModel):
    success: bool = True
    suggestions: Dict[str, Any]
