from __future__ import annotations
from typing import Any, Optional

import httpx

from .base import HTTPProvider


class OllamaProvider(HTTPProvider):
    name = "ollama"

    def __init__(
        self,
        model: str = "llama3.1",
        base_url: str = "http://localhost:11434",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout=timeout, client=client)
        self.model = model
        self.base_url = base_url.rstrip("/")

    async def generate(self, *, system: str, user: str, model: Optional[str] = None) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": model or self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "options": {"temperature": 0.2},
        }

        data = await self._post_json(url, payload)
        return self._content(data)

    def _content(self, data: Any) -> str:
        message = data.get("message") if isinstance(data, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise self._envelope_error(data, "message.content is not text")
        return content
