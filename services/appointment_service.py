"""
Appointment Service
Doctor-side appointment lists, status changes and call bookkeeping
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import datetime, date
from sqlalchemy.orm import Session

from database import get_db_context
from config import portal_config
import models
from models import AppointmentStatus


logger = logging.getLogger(__name__)


CATEGORIES = ("pending", "confirmed", "today", "completed", "cancelled")


def appointment_to_dict(appointment: models.Appointment) -> Dict[str, Any]:
    """Serialize an appointment with the patient's display info"""
    return {
        "id": appointment.id,
        "patient_id": appointment.patient_id,
        "doctor_id": appointment.doctor_id,
        "scheduled_date": appointment.scheduled_date.isoformat() if appointment.scheduled_date else None,
        "scheduled_time": appointment.scheduled_time,
        "duration_minutes": appointment.duration_minutes,
        "mode": appointment.mode,
        "status": appointment.status,
        "chief_complaint": appointment.chief_complaint,
        "complaint_description": appointment.chief_complaint,
        "symptoms": list(appointment.symptoms or []),
        "doctor_notes": appointment.doctor_notes,
        "call_started_at": appointment.call_started_at.isoformat() if appointment.call_started_at else None,
        "patient": appointment.patient.display_info if appointment.patient else None,
    }


def empty_categories() -> Dict[str, List[Dict[str, Any]]]:
    return {category: [] for category in CATEGORIES}


def categorize(appointments: List[models.Appointment], today: date) -> Dict[str, List[Dict[str, Any]]]:
    """
    Split appointments into the doctor's dashboard buckets

    An appointment can land in more than one bucket: a scheduled
    appointment for today is both pending and today.
    """
    buckets = empty_categories()
    for appointment in appointments:
        item = appointment_to_dict(appointment)
        status = appointment.status
        is_today = appointment.scheduled_date == today

        if status == AppointmentStatus.SCHEDULED.value:
            buckets["pending"].append(item)
        if status == AppointmentStatus.CONFIRMED.value and not is_today:
            buckets["confirmed"].append(item)
        if is_today and status in portal_config.TODAY_APPOINTMENT_STATUSES:
            buckets["today"].append(item)
        if status == AppointmentStatus.COMPLETED.value:
            buckets["completed"].append(item)
        if status == AppointmentStatus.CANCELLED.value:
            buckets["cancelled"].append(item)
    return buckets


class AppointmentService:
    """
    Service for appointment operations
    """

    def _get_or_raise(self, session: Session, appointment_id: int) -> models.Appointment:
        appointment = session.query(models.Appointment).filter(
            models.Appointment.id == appointment_id
        ).first()
        if not appointment:
            raise LookupError(f"Appointment {appointment_id} not found")
        return appointment

    async def list_for_doctor(
        self,
        doctor_id: int,
        today: Optional[date] = None,
        db: Optional[Session] = None
    ) -> Dict[str, List[Dict[str, Any]]]:
        """
        Categorized appointments for a doctor, ordered by date then time

        Args:
            doctor_id: Doctor ID
            today: Reference date for the "today" bucket
            db: Database session

        Returns:
            Dict of pending, confirmed, today, completed, cancelled lists
        """
        today = today or date.today()

        def _list(session: Session) -> Dict[str, List[Dict[str, Any]]]:
            appointments = session.query(models.Appointment).filter(
                models.Appointment.doctor_id == doctor_id
            ).order_by(
                models.Appointment.scheduled_date.asc(),
                models.Appointment.scheduled_time.asc()
            ).all()
            return categorize(appointments, today)

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)

    async def update_status(
        self,
        appointment_id: int,
        status: str,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Change an appointment's status

        Raises:
            ValueError: Unknown status
            LookupError: Unknown appointment
        """
        if status not in portal_config.APPOINTMENT_STATUSES:
            raise ValueError(
                f"Invalid status '{status}'. Must be one of: {', '.join(portal_config.APPOINTMENT_STATUSES)}"
            )

        def _update(session: Session) -> Dict[str, Any]:
            appointment = self._get_or_raise(session, appointment_id)
            previous = appointment.status
            appointment.status = status
            appointment.updated_at = datetime.utcnow()
            session.commit()
            session.refresh(appointment)

            logger.info(f"Appointment {appointment_id} status {previous} -> {status}")
            return appointment_to_dict(appointment)

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def delete(
        self,
        appointment_id: int,
        db: Optional[Session] = None
    ) -> bool:
        """Permanently remove an appointment; raises LookupError if unknown"""
        def _delete(session: Session) -> bool:
            appointment = self._get_or_raise(session, appointment_id)
            session.delete(appointment)
            session.commit()
            logger.info(f"Appointment {appointment_id} deleted")
            return True

        if db:
            return _delete(db)

        with get_db_context() as session:
            return _delete(session)

    async def start_call(
        self,
        appointment_id: int,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Record the start of a video consultation

        Only the first call stamps call_started_at and moves the appointment
        to in_progress; later calls report the existing state.

        Returns:
            {"already_started": bool, "appointment": dict}
        """
        def _start(session: Session) -> Dict[str, Any]:
            appointment = self._get_or_raise(session, appointment_id)

            if appointment.call_started_at:
                return {"already_started": True, "appointment": appointment_to_dict(appointment)}

            now = datetime.utcnow()
            appointment.call_started_at = now
            appointment.status = AppointmentStatus.IN_PROGRESS.value
            appointment.updated_at = now
            session.commit()
            session.refresh(appointment)

            logger.info(f"Call started for appointment {appointment_id}")
            return {"already_started": False, "appointment": appointment_to_dict(appointment)}

        if db:
            return _start(db)

        with get_db_context() as session:
            return _start(session)


# Singleton instance
appointment_service = AppointmentService()
