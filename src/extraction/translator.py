from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from llm.schemas import ExtractionCandidate
from todo_ai.models import DEFAULT_PRIORITY, PRIORITIES, Task, utcnow

logger = logging.getLogger(__name__)


def normalise_priority(value: str) -> str:
    p = value.strip().lower()
    if p in PRIORITIES:
        return p
    logger.warning(f"Unexpected priority {value!r} from model, using {DEFAULT_PRIORITY!r}")
    return DEFAULT_PRIORITY


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # model timestamps without an offset are taken as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_task(
    candidate: ExtractionCandidate,
    owner: uuid.UUID,
    source_text: str,
    now: Optional[datetime] = None,
) -> Task:
    """Assign identity and ownership to an extraction candidate.

    Every task produced from one input shares the full input as ``raw_text``.
    """
    ts = now or utcnow()
    return Task(
        id=uuid.uuid4(),
        user_id=owner,
        title=candidate.title,
        description=candidate.description,
        due_date=_as_utc(candidate.due_date),
        priority=normalise_priority(candidate.priority),
        raw_text=source_text,
        created_at=ts,
        updated_at=ts,
    )
