"""
Tools Package
Side-channel utilities for the VaidyaPortal backend
"""

from .notification_service import (
    NotificationService,
    NotificationType,
    NotificationRequest,
    NotificationResult,
    notification_service,
)

from .translations import (
    TranslationCache,
    translation_cache,
    translate,
    get_static_translation,
    SUPPORTED_LOCALES,
    DEFAULT_LOCALE,
)


__all__ = [
    # Notifications
    "NotificationService",
    "NotificationType",
    "NotificationRequest",
    "NotificationResult",
    "notification_service",
    # Translations
    "TranslationCache",
    "translation_cache",
    "translate",
    "get_static_translation",
    "SUPPORTED_LOCALES",
    "DEFAULT_LOCALE",
]
