"""
Adherence Service
Aggregates per-dose adherence records into prescription progress summaries
"""

import logging
from typing import Dict, List, Optional, Any, Iterable
from datetime import datetime, date
from sqlalchemy.orm import Session
from sqlalchemy import desc

from database import get_db_context, run_detached
from config import portal_config
import models


logger = logging.getLogger(__name__)


EPOCH = datetime(1970, 1, 1)

TAKEN = "taken"
SKIPPED = "skipped"
PENDING = "pending"


def _classify(record) -> str:
    """Per-record status; missing flags count as pending"""
    if record.is_taken:
        return TAKEN
    if record.is_skipped:
        return SKIPPED
    return PENDING


def _rate(taken: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(taken / total * 100, 1)


def _date_key(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _activity_time(record) -> datetime:
    # Records with neither timestamp sort as oldest
    return record.taken_at or record.skipped_at or EPOCH


def record_to_dict(record) -> Dict[str, Any]:
    """Serialize an adherence record for API responses"""
    return {
        "id": record.id,
        "prescription_id": record.prescription_id,
        "patient_id": record.patient_id,
        "medicine_name": record.medicine_name,
        "scheduled_date": _date_key(record.scheduled_date),
        "scheduled_time": record.scheduled_time,
        "is_taken": bool(record.is_taken),
        "is_skipped": bool(record.is_skipped),
        "taken_at": record.taken_at.isoformat() if record.taken_at else None,
        "skipped_at": record.skipped_at.isoformat() if record.skipped_at else None,
    }


def empty_summary() -> Dict[str, Any]:
    return {
        "total_doses": 0,
        "taken": 0,
        "skipped": 0,
        "pending": 0,
        "adherence_rate": 0.0,
        "daily_breakdown": [],
        "medicine_breakdown": [],
        "recent_activity": [],
    }


def summarize_adherence(
    records: Iterable[Any],
    recent_limit: int = portal_config.RECENT_ACTIVITY_LIMIT
) -> Dict[str, Any]:
    """
    Build an adherence summary from a prescription's dose records.

    The daily and medicine breakdowns keep the order in which dates and
    medicines are first seen, so callers wanting ascending dates must pass
    records sorted by scheduled date.

    Args:
        records: AdherenceRecord-like objects (is_taken, is_skipped,
            scheduled_date, medicine_name, taken_at, skipped_at)
        recent_limit: Maximum entries in the recent activity feed

    Returns:
        Summary dictionary (see ``empty_summary`` for the shape)
    """
    records = list(records)
    if not records:
        return empty_summary()

    total = len(records)
    taken = 0
    skipped = 0
    daily: Dict[Optional[str], Dict[str, Any]] = {}
    by_medicine: Dict[str, Dict[str, Any]] = {}
    acted = []

    for record in records:
        outcome = _classify(record)
        if outcome == TAKEN:
            taken += 1
        elif outcome == SKIPPED:
            skipped += 1

        day_key = _date_key(record.scheduled_date)
        day = daily.setdefault(
            day_key, {"date": day_key, TAKEN: 0, SKIPPED: 0, PENDING: 0}
        )
        day[outcome] += 1

        med = by_medicine.setdefault(
            record.medicine_name,
            {"medicine_name": record.medicine_name, "total": 0, TAKEN: 0, SKIPPED: 0, PENDING: 0},
        )
        med["total"] += 1
        med[outcome] += 1

        if outcome != PENDING:
            acted.append(record)

    medicine_breakdown = []
    for med in by_medicine.values():
        med["adherence_rate"] = _rate(med[TAKEN], med["total"])
        medicine_breakdown.append(med)

    acted.sort(key=_activity_time, reverse=True)

    return {
        "total_doses": total,
        "taken": taken,
        "skipped": skipped,
        "pending": total - taken - skipped,
        "adherence_rate": _rate(taken, total),
        "daily_breakdown": list(daily.values()),
        "medicine_breakdown": medicine_breakdown,
        "recent_activity": [record_to_dict(r) for r in acted[:recent_limit]],
    }


class AdherenceService:
    """
    Service for adherence reporting on prescriptions and patients
    """

    async def get_prescription_summary(
        self,
        prescription_id: int,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Summarize adherence for one prescription

        Unknown prescriptions and prescriptions without records yield the
        all-zero summary rather than an error.

        Returns:
            Summary dictionary plus ``patient`` display info (or None)
        """
        def _get(session: Session) -> Dict[str, Any]:
            prescription = session.query(models.Prescription).filter(
                models.Prescription.id == prescription_id
            ).first()

            records = session.query(models.MedicationAdherence).filter(
                models.MedicationAdherence.prescription_id == prescription_id
            ).order_by(
                models.MedicationAdherence.scheduled_date.asc(),
                models.MedicationAdherence.id.asc()
            ).all()

            summary = summarize_adherence(records)
            patient = prescription.patient if prescription else None
            summary["patient"] = patient.display_info if patient else None

            logger.debug(
                "Adherence summary for prescription %s: %s/%s taken",
                prescription_id, summary["taken"], summary["total_doses"]
            )
            return summary

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def get_patient_records(
        self,
        patient_id: int,
        limit: Optional[int] = None,
        db: Optional[Session] = None
    ) -> List[models.MedicationAdherence]:
        """Get a patient's adherence records, newest scheduled date first"""
        def _get(session: Session) -> List[models.MedicationAdherence]:
            query = session.query(models.MedicationAdherence).filter(
                models.MedicationAdherence.patient_id == patient_id
            ).order_by(desc(models.MedicationAdherence.scheduled_date))
            if limit:
                query = query.limit(limit)
            return query.all()

        if db:
            return _get(db)

        return run_detached(_get)

    async def get_patient_adherence(
        self,
        patient_id: int,
        limit: Optional[int] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """Summary over all of a patient's records across prescriptions"""
        records = await self.get_patient_records(patient_id, limit=limit, db=db)
        # Chronological order for the daily breakdown
        records = sorted(records, key=lambda r: (r.scheduled_date, r.id or 0))
        return summarize_adherence(records)

    def describe_adherence(self, records: Iterable[Any]) -> str:
        """One-line adherence digest for prompts and reports"""
        records = list(records)
        if not records:
            return "No adherence data available"

        summary = summarize_adherence(records)
        rate = round(summary["taken"] / summary["total_doses"] * 100)
        return (
            f"Adherence Rate: {rate}% "
            f"({summary['taken']}/{summary['total_doses']} doses taken, "
            f"{summary['skipped']} skipped)"
        )


# Singleton instance
adherence_service = AdherenceService()
