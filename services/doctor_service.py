"""
Doctor Service
Doctor profile management and clinic directory
"""

import logging
from typing import Dict, List, Optional, Any
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from database import get_db_context
import models


logger = logging.getLogger(__name__)


DUPLICATE_PHONE_MESSAGE = "This phone number is already registered to another user."

DOCTOR_FIELDS = (
    "specialization",
    "custom_specializations",
    "qualification",
    "registration_number",
    "years_of_experience",
    "consultation_fee",
    "bio",
    "clinic_id",
    "clinic_name",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "postal_code",
    "languages",
)


def user_to_dict(user: models.User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "profile_image_url": user.profile_image_url,
        "role": user.role.value if user.role else None,
        "is_verified": bool(user.is_verified),
    }


def doctor_to_dict(doctor: models.Doctor) -> Dict[str, Any]:
    data = {"id": doctor.id, "user_id": doctor.user_id}
    for field in DOCTOR_FIELDS:
        data[field] = getattr(doctor, field)
    data["profile_image_url"] = doctor.user.profile_image_url if doctor.user else None
    return data


def clinic_to_dict(clinic: models.Clinic) -> Dict[str, Any]:
    return {
        "id": clinic.id,
        "clinic_name": clinic.clinic_name,
        "city": clinic.city,
        "state": clinic.state,
        "country": clinic.country,
        "is_verified": bool(clinic.is_verified),
    }


class DoctorService:
    """
    Service for doctor profiles
    """

    async def get_profile(
        self,
        user_id: int,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        User row and doctor row (with the user's profile image)

        Raises:
            LookupError: Unknown user
        """
        def _get(session: Session) -> Dict[str, Any]:
            user = session.query(models.User).filter(models.User.id == user_id).first()
            if not user:
                raise LookupError(f"User {user_id} not found")
            return {
                "user": user_to_dict(user),
                "doctor": doctor_to_dict(user.doctor) if user.doctor else None,
            }

        if db:
            return _get(db)

        with get_db_context() as session:
            return _get(session)

    async def update_profile(
        self,
        user_id: int,
        user_data: Optional[Dict[str, Any]] = None,
        doctor_data: Optional[Dict[str, Any]] = None,
        db: Optional[Session] = None
    ) -> Dict[str, Any]:
        """
        Update the user row and update or create the doctor row

        Args:
            user_id: User ID
            user_data: name, phone (blank is ignored), profile_image_url
            doctor_data: Any of DOCTOR_FIELDS
            db: Database session

        Raises:
            LookupError: Unknown user
            ValueError: Phone number belongs to another user
        """
        def _update(session: Session) -> Dict[str, Any]:
            user = session.query(models.User).filter(models.User.id == user_id).first()
            if not user:
                raise LookupError(f"User {user_id} not found")

            if user_data:
                if user_data.get("name"):
                    user.name = user_data["name"]

                phone = (user_data.get("phone") or "").strip()
                if phone:
                    taken = session.query(models.User).filter(
                        models.User.phone == phone,
                        models.User.id != user_id
                    ).first()
                    if taken:
                        raise ValueError(DUPLICATE_PHONE_MESSAGE)
                    user.phone = phone

                if "profile_image_url" in user_data:
                    user.profile_image_url = user_data["profile_image_url"]
                user.updated_at = datetime.utcnow()

            if doctor_data:
                values = {k: v for k, v in doctor_data.items() if k in DOCTOR_FIELDS}
                doctor = user.doctor
                if doctor:
                    for field, value in values.items():
                        setattr(doctor, field, value)
                    doctor.updated_at = datetime.utcnow()
                else:
                    doctor = models.Doctor(user_id=user_id, **values)
                    session.add(doctor)
                    logger.info(f"Created doctor profile for user {user_id}")

            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if "phone" in str(e.orig).lower():
                    raise ValueError(DUPLICATE_PHONE_MESSAGE) from e
                raise

            session.refresh(user)
            logger.info(f"Updated profile for user {user_id}")
            return {
                "user": user_to_dict(user),
                "doctor": doctor_to_dict(user.doctor) if user.doctor else None,
            }

        if db:
            return _update(db)

        with get_db_context() as session:
            return _update(session)

    async def list_clinics(self, db: Optional[Session] = None) -> List[Dict[str, Any]]:
        """All clinics, ordered by name"""
        def _list(session: Session) -> List[Dict[str, Any]]:
            clinics = session.query(models.Clinic).order_by(models.Clinic.clinic_name.asc()).all()
            return [clinic_to_dict(c) for c in clinics]

        if db:
            return _list(db)

        with get_db_context() as session:
            return _list(session)


# Singleton instance
doctor_service = DoctorService()
