"""
Translations API Router
UI string lookup for the portal front end
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from tools.translations import translate, translation_cache, SUPPORTED_LOCALES, DEFAULT_LOCALE


router = APIRouter(prefix="/i18n", tags=["i18n"])


class TranslationEntry(BaseModel):
    text: str = Field(..., min_length=1)
    locale: str = Field(..., min_length=2, max_length=10)
    translation: str = Field(..., min_length=1)


@router.get("/translate")
async def translate_text(
    text: str = Query(..., description="English UI string"),
    locale: str = Query(DEFAULT_LOCALE, description="Target locale")
):
    return {"success": True, "text": text, "locale": locale, "translation": translate(text, locale)}


@router.put("/translations")
async def cache_translation(entry: TranslationEntry):
    """Remember a translation for the lifetime of the process"""
    translation_cache.set(entry.text, entry.locale, entry.translation)
    return {"success": True, "cached": translation_cache.size()}


@router.get("/locales")
async def list_locales():
    return {"success": True, "default": DEFAULT_LOCALE, "locales": SUPPORTED_LOCALES}
