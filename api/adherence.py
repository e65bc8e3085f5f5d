"""
Adherence API Router
Prescription progress view for doctors
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.deps import get_db, services
from api.schemas.adherence import AdherenceStatsResponse


router = APIRouter(prefix="/doctor/adherence", tags=["adherence"])


@router.get("/{prescription_id}", response_model=AdherenceStatsResponse)
async def get_prescription_adherence(
    prescription_id: int,
    db: Session = Depends(get_db)
):
    """
    Adherence summary for one prescription

    Prescriptions without dose records (or unknown ids) return zero counts.
    Store failures propagate to the SQLAlchemy error handler (500).
    """
    adherence_service = services.get_adherence_service()
    stats = await adherence_service.get_prescription_summary(prescription_id, db=db)
    return {"success": True, "stats": stats}
