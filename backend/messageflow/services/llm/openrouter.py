"""OpenRouter provider - one HTTP API in front of every vendor's models."""

import logging
from typing import Any

import httpx

from messageflow.services.llm.base import BaseLLMProvider

logger = logging.getLogger(__name__)


class OpenRouterProvider(BaseLLMProvider):
    """Chat-completions client for the OpenRouter API."""

    def __init__(self, api_key: str, base_url: str = "https://openrouter.ai/api/v1", timeout: float = 180.0):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        if not api_key:
            logger.warning("OpenRouter API key is not set. AI requests will fail.")

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ValueError("OpenRouter API key not configured. Set MESSAGEFLOW_OPENROUTER_API_KEY.")
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, model_id: str, prompt: str) -> str:
        payload: dict[str, Any] = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
        }
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            resp = await client.post(
                f"{self._base_url}/chat/completions",
                headers=self._headers(),
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()

        if "error" in data:
            error = data["error"]
            raise RuntimeError(error.get("message", str(error)) if isinstance(error, dict) else str(error))

        choices = data.get("choices") or []
        if not choices:
            raise RuntimeError(f"No choices returned for model {model_id}")
        return choices[0].get("message", {}).get("content") or ""
