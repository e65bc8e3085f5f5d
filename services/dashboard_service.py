"""
Dashboard Service
Headline numbers and chart series for the doctor dashboard
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import date, timedelta
from sqlalchemy.orm import Session

from database import get_db_context
from config import portal_config
import models
from models import AppointmentStatus


logger = logging.getLogger(__name__)


MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def empty_stats() -> Dict[str, Any]:
    return {
        "total_patients": 0,
        "today_appointments": 0,
        "pending_approvals": 0,
        "monthly_revenue": 0.0,
        "appointments_data": [],
        "patients_data": [],
    }


def _shift_month(year: int, month: int, offset: int):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def compute_stats(
    appointments: List[models.Appointment],
    consultation_fee: float,
    today: date,
    months: int = portal_config.DASHBOARD_MONTHS,
    weeks: int = portal_config.DASHBOARD_WEEKS
) -> Dict[str, Any]:
    """Dashboard numbers from a doctor's appointments"""
    fee = float(consultation_fee or 0)

    today_count = sum(1 for a in appointments if a.scheduled_date == today)
    pending = sum(1 for a in appointments if a.status == AppointmentStatus.SCHEDULED.value)
    completed_this_month = sum(
        1 for a in appointments
        if a.status == AppointmentStatus.COMPLETED.value
        and a.scheduled_date
        and (a.scheduled_date.year, a.scheduled_date.month) == (today.year, today.month)
    )

    appointments_data = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -offset)
        count = sum(
            1 for a in appointments
            if a.scheduled_date and (a.scheduled_date.year, a.scheduled_date.month) == (year, month)
        )
        appointments_data.append({"month": MONTH_ABBREVIATIONS[month - 1], "year": year, "count": count})

    # Week N covers [today - (weeks - N) * 7, +7 days)
    patients_data = []
    for offset in range(weeks - 1, -1, -1):
        week_start = today - timedelta(days=offset * 7)
        week_end = week_start + timedelta(days=7)
        week_patients = {
            a.patient_id for a in appointments
            if a.scheduled_date and week_start <= a.scheduled_date < week_end
        }
        patients_data.append({"date": f"Week {weeks - offset}", "patients": len(week_patients)})

    return {
        "total_patients": len({a.patient_id for a in appointments}),
        "today_appointments": today_count,
        "pending_approvals": pending,
        "monthly_revenue": completed_this_month * fee,
        "appointments_data": appointments_data,
        "patients_data": patients_data,
    }


class DashboardService:
    """
    Service for dashboard statistics
    """

    async def get_stats(
        self,
        doctor_id: int,
        today: Optional[date] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Dashboard statistics for a doctor

        Unknown doctors get all-zero stats with empty series.
        """
        today = today or date.today()

        def _get(session: Session) -> Dict[str, Any]:
            doctor = session.query(models.Doctor).filter(
                models.Doctor.id == doctor_id
            ).first()
            if not doctor:
                logger.info(f"Dashboard requested for unknown doctor {doctor_id}")
                return empty_stats()

            appointments = session.query(models.Appointment).filter(
                models.Appointment.doctor_id == doctor_id
            ).all()
            return compute_stats(appointments, doctor.consultation_fee, today)

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)


# Singleton instance
dashboard_service = DashboardService()
