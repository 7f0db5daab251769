"""
Client for an OpenAI-compatible chat completions endpoint.

One attempt per call, bounded by AI_TIMEOUT_SECONDS. Every failure mode
(missing key, transport error, timeout, non-200, empty content) surfaces as
ExternalServiceError; AIService decides what to do about it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from lifetasks.core.config import settings
from lifetasks.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class AIClient:
    """Thin async wrapper around POST {base_url}/chat/completions."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.base_url = (base_url or settings.AI_BASE_URL).rstrip("/")
        self.model = model or settings.AI_MODEL
        self.timeout_seconds = timeout_seconds or settings.AI_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _build_request_body(self, system_prompt: str, user_prompt: str, json_mode: bool) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model,
            "temperature": 0.3,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        return body

    @staticmethod
    def _extract_content(payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        choices = payload.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return None
        content = (choices[0].get("message") or {}).get("content")
        return content if isinstance(content, str) else None

    async def complete(self, system_prompt: str, user_prompt: str, *, json_mode: bool = False) -> str:
        """Send one chat completion request and return the message text."""
        if not self.api_key:
            raise ExternalServiceError("AI service is not configured (missing OPENAI_API_KEY)")

        body = self._build_request_body(system_prompt, user_prompt, json_mode)
        headers = {"Authorization": f"Bearer {self.api_key}"}
        timeout = httpx.Timeout(self.timeout_seconds)

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                resp = await client.post(self.endpoint, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise ExternalServiceError(f"AI request timed out after {self.timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(f"AI request failed: {exc.__class__.__name__}") from exc

        if resp.status_code != 200:
            raise ExternalServiceError(
                f"AI service returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except json.JSONDecodeError as exc:
            raise ExternalServiceError("AI service returned a non-JSON body") from exc

        content = self._extract_content(payload)
        if not content or not content.strip():
            raise ExternalServiceError("AI service returned no message content")

        logger.debug("AI completion received (%d chars) from %s", len(content), self.model)
        return content
