"""
LLM Service
Centralized service for all LLM interactions using Google Gemini
"""

import logging
from typing import Dict, Optional, Any
import json
import re
import asyncio

import requests

from config import settings


logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Gemini call failed or is not configured"""


class LLMService:
    """
    Service for interacting with the Gemini generateContent REST API
    """

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model_name = model_name or settings.LLM_MODEL
        self.temperature = settings.LLM_TEMPERATURE
        self.max_tokens = settings.LLM_MAX_TOKENS
        self.timeout = settings.LLM_TIMEOUT_SECONDS
        self.provider = "gemini"

        # Usage tracking
        self._total_tokens_used = 0
        self._request_count = 0

        if not self.api_key:
            logger.warning("GOOGLE_API_KEY not configured")
        else:
            logger.info(f"Gemini API configured with model: {self.model_name}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{settings.GEMINI_BASE_URL}/models/{self.model_name}:generateContent"

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_mime_type: Optional[str] = None
    ) -> str:
        """
        Generate a response from the LLM

        Args:
            prompt: User prompt
            system_prompt: System instructions
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum response tokens
            response_mime_type: e.g. "application/json" to request JSON output

        Returns:
            Generated text response

        Raises:
            LLMError: Not configured, transport failure or non-200 response
        """
        if not self.is_configured:
            raise LLMError("Gemini is not configured. Set GOOGLE_API_KEY.")

        generation_config = {
            "temperature": temperature if temperature is not None else self.temperature,
            "maxOutputTokens": max_tokens if max_tokens is not None else self.max_tokens,
        }
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        try:
            resp = await asyncio.get_event_loop().run_in_executor(
                None,
                lambda: requests.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    headers={"Content-Type": "application/json"},
                    json=payload,
                    timeout=self.timeout,
                ),
            )
        except requests.RequestException as e:
            logger.error("Gemini request failed: %s", e)
            raise LLMError(f"Gemini request failed: {e}") from e

        if resp.status_code != 200:
            logger.error("Gemini API error %s: %s", resp.status_code, resp.text[:500])
            raise LLMError(f"Gemini API error: {resp.status_code}")

        data = resp.json()
        text = self.extract_text(data)

        usage = data.get("usageMetadata") or {}
        self._total_tokens_used += usage.get("totalTokenCount", 0)
        self._request_count += 1

        return text

    @staticmethod
    def extract_text(data: Dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate"""
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    async def generate_json(
        self,
        prompt: str,
        schema_hint: Optional[Dict[str, Any]] = None,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Generate a JSON response from the LLM

        Returns:
            Parsed JSON response, or {} when nothing parseable came back
        """
        json_system = system_prompt or ""
        json_system += "\n\nYou must respond with valid JSON only. No additional text, no markdown code blocks, just pure JSON."

        if schema_hint:
            json_system += f"\n\nExpected JSON structure:\n{json.dumps(schema_hint, indent=2)}"

        response = await self.generate(
            prompt=prompt,
            system_prompt=json_system,
            response_mime_type="application/json",
            **kwargs
        )

        return self.parse_json_response(response)

    def parse_json_response(
        self,
        response: str,
        default: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Parse JSON from LLM response, handling code fences and stray prose
        """
        if default is None:
            default = {}

        if not response:
            return default

        response = response.strip()

        try:
            return json.loads(response)
        except json.JSONDecodeError:
            pass

        json_patterns = [
            r'```json\s*([\s\S]*?)\s*```',
            r'```\s*([\s\S]*?)\s*```',
            r'\{[\s\S]*\}',
        ]

        for pattern in json_patterns:
            match = re.search(pattern, response)
            if match:
                try:
                    json_str = match.group(1) if '```' in pattern else match.group(0)
                    return json.loads(json_str.strip())
                except json.JSONDecodeError:
                    continue

        logger.warning(f"Failed to parse JSON from response: {response[:200]}...")
        return default

    def get_usage_stats(self) -> Dict[str, Any]:
        """Get usage statistics"""
        return {
            "total_tokens": self._total_tokens_used,
            "request_count": self._request_count,
            "model": self.model_name,
            "provider": self.provider,
            "configured": self.is_configured,
        }

    def reset_usage_stats(self):
        self._total_tokens_used = 0
        self._request_count = 0


# Singleton instance
llm_service = LLMService()
