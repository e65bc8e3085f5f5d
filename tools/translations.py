"""
Translations Tool
Static UI string translations with a process-scoped lookup cache
"""

import logging
import threading
from typing import Dict, Optional


logger = logging.getLogger(__name__)


DEFAULT_LOCALE = "en"

SUPPORTED_LOCALES = [
    "en", "es", "hi", "fr", "de", "zh", "ar", "pt", "ja", "bn", "te", "mr", "ta", "gu",
]

# text -> {locale: translation}
STATIC_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "Dashboard": {
        "es": "Panel de control",
        "hi": "डैशबोर्ड",
        "fr": "Tableau de bord",
        "de": "Armaturenbrett",
        "zh": "仪表板",
        "ar": "لوحة القيادة",
        "pt": "Painel",
        "ja": "ダッシュボード",
        "bn": "ড্যাশবোর্ড",
        "te": "డాష్‌బోర్డ్",
        "mr": "डॅशबोर्ड",
        "ta": "டாஷ்போர்டு",
        "gu": "ડેશબોર્ડ",
    },
    "Sign In": {
        "es": "Iniciar sesión",
        "hi": "साइन इन करें",
        "fr": "Se connecter",
        "de": "Anmelden",
        "zh": "登录",
        "ar": "تسجيل الدخول",
        "pt": "Entrar",
        "ja": "サインイン",
        "bn": "সাইন ইন",
        "te": "సైన్ ఇన్",
        "mr": "साइन इन",
        "ta": "உள்நுழைய",
        "gu": "સાઇન ઇન",
    },
    "Expert Doctor": {
        "es": "Doctor Experto",
        "hi": "विशेषज्ञ डॉक्टर",
        "fr": "Médecin Expert",
        "de": "Facharzt",
        "zh": "专家医生",
        "ar": "طبيب خبير",
        "pt": "Médico Especialista",
        "ja": "専門医",
    },
    "Verified Practitioners": {
        "es": "Profesionales Verificados",
        "hi": "सत्यापित चिकित्सक",
        "fr": "Praticiens Vérifiés",
        "de": "Verifizierte Ärzte",
        "pt": "Profissionais Verificados",
    },
    "Personalized Care": {
        "es": "Atención Personalizada",
        "hi": "व्यक्तिगत देखभाल",
        "fr": "Soins Personnalisés",
        "de": "Persönliche Betreuung",
        "pt": "Cuidado Personalizado",
    },
}


class TranslationCache:
    """
    Process-wide translation lookup table.

    Entries live for the lifetime of the process and are never evicted; the
    table only ever holds UI strings, so it stays small.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def get(self, text: str, locale: str) -> Optional[str]:
        locale_entries = self._entries.get(locale)
        if locale_entries:
            return locale_entries.get(text)
        return None

    def set(self, text: str, locale: str, translation: str) -> None:
        with self._lock:
            self._entries.setdefault(locale, {})[text] = translation

    def size(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def get_static_translation(text: str, locale: str) -> Optional[str]:
    if locale == DEFAULT_LOCALE or not text:
        return None
    return STATIC_TRANSLATIONS.get(text, {}).get(locale)


def translate(text: str, locale: str, cache: Optional["TranslationCache"] = None) -> str:
    """
    Translate a UI string

    Lookup order: static table, then the cache, then the text unchanged.
    """
    if locale == DEFAULT_LOCALE or not text:
        return text

    static = get_static_translation(text, locale)
    if static:
        return static

    cached = (cache or translation_cache).get(text, locale)
    if cached:
        return cached

    logger.debug("No %s translation for %r", locale, text)
    return text


# Process-scoped instance
translation_cache = TranslationCache()
