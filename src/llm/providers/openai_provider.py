from __future__ import annotations
from typing import Any, Optional

import httpx

from .base import HTTPProvider


class OpenAIProvider(HTTPProvider):
    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key.strip()
        self.model = model
        self.base_url = base_url.rstrip("/")

        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")

    async def generate(self, *, system: str, user: str, model: Optional[str] = None) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": 0.2,
        }

        data = await self._post_json(url, payload, headers=headers)
        return self._content(data)

    def _content(self, data: Any) -> str:
        if not isinstance(data, dict):
            raise self._envelope_error(data, "body is not an object")
        choices = data.get("choices")
        if not isinstance(choices, list):
            raise self._envelope_error(data, "missing choices")
        if not choices:
            raise self._envelope_error(data, "empty choices")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise self._envelope_error(data, "choices[0].message.content is not text")
        return content
