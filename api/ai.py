"""
AI API Router
Endpoints for AI-assisted prescription drafting
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_db, services, not_found
from api.schemas.ai import (
    GeneratePrescriptionRequest,
    GeneratePrescriptionResponse,
    SuggestionRequest,
    SuggestionResponse,
)
from services.ai_prescription_service import AIPrescriptionError


router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/generate-prescription", response_model=GeneratePrescriptionResponse)
async def generate_prescription(
    request: GeneratePrescriptionRequest,
    db: Session = Depends(get_db)
):
    """
    Draft a prescription from the patient's profile, visit and history

    The draft is not saved; the doctor reviews it and creates it through
    the prescriptions endpoint.
    """
    ai_service = services.get_ai_prescription_service()
    try:
        draft = await ai_service.generate_for_patient(
            request.patient_id,
            appointment_id=request.appointment_id,
            db=db
        )
    except LookupError as e:
        raise not_found(str(e))
    except AIPrescriptionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate prescription: {e}"
        )
    return {"success": True, "prescription": draft}


@router.post("/prescription-suggestions", response_model=SuggestionResponse)
async def prescription_suggestions(request: SuggestionRequest):
    """Quick medicine suggestions; falls back to standard regimens without the model"""
    ai_service = services.get_ai_prescription_service()
    suggestions = await ai_service.suggest_medicines(
        request.diagnosis,
        symptoms=request.symptoms,
        age=request.age,
        gender=request.gender
    )
    return {"success": True, "suggestions": suggestions}
