import json
import logging
from datetime import datetime
from typing import Any, List

from pydantic import ValidationError

from extraction.date_checks import DueDateCheck, apply_due_date_check
from llm.llm_client import LLMClient
from llm.prompts import build_extraction_prompt
from llm.schemas import CandidateList, ExtractionCandidate
from todo_ai.errors import ExtractionParseError

logger = logging.getLogger(__name__)

# The only wrapper object accepted around the candidate array.
ENVELOPE_FIELD = "tasks"
_MAX_PAYLOAD_LOG_CHARS = 500


def parse_candidates(payload: str) -> List[ExtractionCandidate]:
    """Parse the model's raw text as the task-candidate array.

    The whole payload must be JSON: either the array itself or an object
    whose ``tasks`` field holds it. Prose around the JSON is rejected.
    """
    try:
        data: Any = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise ExtractionParseError(
            f"failed to unmarshal tasks from LLM response: {e}", payload=payload
        ) from e

    if isinstance(data, dict) and set(data) == {ENVELOPE_FIELD}:
        data = data[ENVELOPE_FIELD]

    if not isinstance(data, list):
        raise ExtractionParseError(
            f"failed to unmarshal tasks from LLM response: expected a JSON array, got {type(data).__name__}",
            payload=payload,
        )

    try:
        return CandidateList.validate_python(data)
    except ValidationError as e:
        raise ExtractionParseError(
            f"failed to unmarshal tasks from LLM response: {e.error_count()} schema violation(s)",
            payload=payload,
        ) from e


class TaskExtractor:

    def __init__(self, llm_client: LLMClient, due_date_check: DueDateCheck = DueDateCheck.OFF):
        self.llm_client = llm_client
        self.due_date_check = due_date_check

    async def extract(self, text: str, reference_time: datetime) -> List[ExtractionCandidate]:
        system = build_extraction_prompt(reference_time)
        payload = await self.llm_client.complete(system, text)

        try:
            candidates = parse_candidates(payload)
        except ExtractionParseError:
            logger.warning(
                f"Unparseable LLM payload: {payload[:_MAX_PAYLOAD_LOG_CHARS]!r}"
            )
            raise

        logger.info(f"Extracted {len(candidates)} candidate(s)")
        return apply_due_date_check(candidates, reference_time, self.due_date_check)
