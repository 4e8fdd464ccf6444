from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from todo_ai.errors import ExtractionParseError, ExtractionTransportError

logger = logging.getLogger(__name__)

# Provider error bodies can be large; keep diagnostics readable.
_MAX_DETAIL_CHARS = 2000


class LLMProvider(ABC):
    name = "base"

    @abstractmethod
    async def generate(self, *, system: str, user: str, model: Optional[str] = None) -> str:
        """
        Must return the model output as TEXT (the caller parses/validates the JSON).

        Raises ExtractionTransportError when the provider cannot be reached or
        answers with a non-success status, ExtractionParseError when the
        response envelope does not have the expected shape.
        """
        raise NotImplementedError


class HTTPProvider(LLMProvider):
    """Shared transport handling for providers speaking JSON over HTTP."""

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self._client = client

    async def _post_json(self, url: str, payload: dict, headers: Optional[dict] = None) -> Any:
        try:
            if self._client is not None:
                r = await self._client.post(url, headers=headers, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    r = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} request failed: {e!r}")
            raise ExtractionTransportError(
                f"failed to send request to {self.name}: {e}"
            ) from e

        if not r.is_success:
            detail = r.text[:_MAX_DETAIL_CHARS]
            logger.warning(f"{self.name} api error: status {r.status_code}, body: {detail}")
            raise ExtractionTransportError(
                f"{self.name} api error: status {r.status_code}",
                status_code=r.status_code,
                detail=detail,
            )

        try:
            return r.json()
        except ValueError as e:
            raise ExtractionParseError(
                f"failed to decode {self.name} response: {e}",
                payload=r.text[:_MAX_DETAIL_CHARS],
            ) from e

    def _envelope_error(self, data: Any, reason: str) -> ExtractionParseError:
        return ExtractionParseError(
            f"unexpected {self.name} response envelope: {reason}",
            payload=str(data)[:_MAX_DETAIL_CHARS],
        )
