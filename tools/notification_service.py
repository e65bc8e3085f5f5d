"""
Notification Service Tool
Best-effort dispatch of portal events to the notification endpoint
"""

import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import requests

from config import settings


logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    """Types of notifications"""
    PRESCRIPTION_CREATED = "prescription_created"


@dataclass
class NotificationResult:
    """Result of dispatching a notification"""
    success: bool
    notification_type: NotificationType
    status_code: Optional[int] = None
    delivered_at: Optional[datetime] = None
    error: Optional[str] = None


@dataclass
class NotificationRequest:
    """Notification request details"""
    notification_type: NotificationType
    data: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"type": self.notification_type.value, "data": self.data}


class NotificationService:
    """
    Fire-and-forget notification dispatcher.

    Failures are logged and reported in the returned result; nothing here
    raises, so callers can schedule it as a background task without guarding.
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url if url is not None else settings.NOTIFICATION_URL
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT_SECONDS
        self._sent_count = 0
        self._failed_count = 0

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def send(self, request: NotificationRequest) -> NotificationResult:
        """POST a notification; never raises"""
        if not self.is_configured:
            logger.info("Notification URL not configured, skipping %s", request.notification_type.value)
            return NotificationResult(
                success=False,
                notification_type=request.notification_type,
                error="notification endpoint not configured"
            )

        try:
            resp = requests.post(
                self.url,
                json=request.to_payload(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self._failed_count += 1
            logger.error("Failed to send %s notification: %s", request.notification_type.value, e)
            return NotificationResult(
                success=False,
                notification_type=request.notification_type,
                error=str(e)
            )
        except Exception as e:
            self._failed_count += 1
            logger.exception("Unexpected error sending %s notification", request.notification_type.value)
            return NotificationResult(
                success=False,
                notification_type=request.notification_type,
                error=str(e)
            )

        if resp.status_code >= 400:
            self._failed_count += 1
            logger.error(
                "Notification endpoint rejected %s: %s %s",
                request.notification_type.value, resp.status_code, resp.text[:200]
            )
            return NotificationResult(
                success=False,
                notification_type=request.notification_type,
                status_code=resp.status_code,
                error=f"HTTP {resp.status_code}"
            )

        self._sent_count += 1
        logger.info("Sent %s notification", request.notification_type.value)
        return NotificationResult(
            success=True,
            notification_type=request.notification_type,
            status_code=resp.status_code,
            delivered_at=datetime.utcnow()
        )

    def send_prescription_created(
        self,
        patient_id: int,
        doctor_id: int,
        diagnosis: str,
        medicines: List[Dict[str, Any]],
        instructions: Optional[str] = None
    ) -> NotificationResult:
        """Tell the patient and doctor apps about a new prescription"""
        return self.send(NotificationRequest(
            notification_type=NotificationType.PRESCRIPTION_CREATED,
            data={
                "patientId": patient_id,
                "doctorId": doctor_id,
                "diagnosis": diagnosis,
                "medicines": medicines,
                "instructions": instructions,
            }
        ))

    def get_stats(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured,
            "sent": self._sent_count,
            "failed": self._failed_count,
        }


# Singleton instance
notification_service = NotificationService()
