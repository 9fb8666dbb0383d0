from typing import Any, Dict, List, Optional
import json
import logging

import httpx

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK_LIMIT = 200
EMPTY_SUMMARY = "No summary generated."

DEFAULT_RECOVERY_TIPS = [
    "Stay hydrated - drink plenty of water",
    "Avoid heavy lifting for 24 hours",
    "Rest well and listen to your body",
]


def _summary_prompt(notes: str, service_type: str) -> str:
    return (
        f"Summarize the following client notes for a {service_type} massage session.\n"
        "Extract key focus areas and any health concerns.\n"
        "Keep it professional and concise for a therapist.\n\n"
        f"Notes: {notes}"
    )


def _tips_prompt(service_type: str) -> str:
    return f"Provide 3 brief post-care recovery tips for a client who just had a {service_type} session."


def offline_summary(notes: str, service_type: str) -> str:
    """Deterministic stand-in used when no API key is configured."""
    truncated = notes[:SUMMARY_FALLBACK_LIMIT]
    suffix = "..." if len(notes) > SUMMARY_FALLBACK_LIMIT else ""
    return f"Client notes for {service_type} session: {truncated}{suffix}"


class NoteSummarizer:
    """Optional Gemini-backed helper for clinician-facing text.

    Without an API key every call answers locally. With a key, any failure of
    the remote call is logged and degraded to a fallback; nothing is raised to
    the caller.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-3-flash-preview",
        base_url: str = "https://generativelanguage.googleapis.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _generate(self, prompt: str, generation_config: Dict[str, Any]) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(f"/v1beta/models/{self.model}:generateContent", headers=headers, json=payload)
            resp.raise_for_status()
            data = resp.json()

        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    async def summarize(self, notes: str, service_type: str) -> str:
        if not self.enabled:
            return offline_summary(notes, service_type)

        try:
            text = await self._generate(
                _summary_prompt(notes, service_type),
                {"temperature": 0.7, "topP": 0.95},
            )
        except Exception as e:
            logger.error(f"AI summary error: {e}")
            return f"Client notes: {notes}"

        return text.strip() or EMPTY_SUMMARY

    async def get_recovery_tips(self, service_type: str) -> List[str]:
        if not self.enabled:
            return list(DEFAULT_RECOVERY_TIPS)

        try:
            text = await self._generate(
                _tips_prompt(service_type),
                {
                    "responseMimeType": "application/json",
                    "responseSchema": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
            )
            tips = json.loads(text or "[]")
        except Exception as e:
            logger.info(f"Using default recovery tips: {e}")
            return list(DEFAULT_RECOVERY_TIPS)

        if not isinstance(tips, list) or not tips or not all(isinstance(t, str) for t in tips):
            logger.info("Recovery tips response was not a list of strings, using defaults")
            return list(DEFAULT_RECOVERY_TIPS)
        return tips[:3]
