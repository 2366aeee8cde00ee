from __future__ import annotations

from typing import Any, Optional

import httpx

from ..core.constants import REMOTE_TIMEOUT_SECONDS

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiTextGenerator:
    """Text generation over the Gemini REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout, connect=5.0))

    def generate(self, prompt: str) -> str:
        r = self._client.post(
            GEMINI_ENDPOINT.format(model=self._model),
            params={"key": self._api_key},
            json={"contents": [{"parts": [{"text": prompt}]}]},
        )
        r.raise_for_status()
        return _extract_text(r.json())

    def close(self) -> None:
        self._client.close()


def _extract_text(payload: dict[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(str(p.get("text", "")) for p in parts)
