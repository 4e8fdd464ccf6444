from __future__ import annotations
import json
from typing import Optional

from llm.providers.base import LLMProvider


class MockProvider(LLMProvider):
    """Offline provider for local development (LLM_PROVIDER=mock)."""

    name = "mock"

    async def generate(self, *, system: str, user: str, model: Optional[str] = None) -> str:
        """
        Returns a dummy JSON array based on the user text.
        """
        if not user.strip():
            return "[]"

        return json.dumps([
            {
                "title": "Buy milk and eggs",
                "description": "Pick up milk and eggs from the grocery store",
                "due_date": None,
                "priority": "medium",
                "subtasks": ["Milk", "Eggs"],
            },
            {
                "title": "Call mom",
                "description": "Give mom a call",
                "due_date": None,
                "priority": "high",
                "subtasks": [],
            },
        ])
