from __future__ import annotations

import logging
from datetime import datetime, time
from enum import Enum
from typing import List

from llm.schemas import ExtractionCandidate

logger = logging.getLogger(__name__)


class DueDateCheck(str, Enum):
    OFF = "off"
    CLEAR_PAST = "clear_past"

    @classmethod
    def parse(cls, value: str) -> "DueDateCheck":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(
                f"DUE_DATE_CHECK must be one of {[m.value for m in cls]}, got {value!r}"
            ) from None


def _start_of_day(reference_time: datetime) -> datetime:
    return datetime.combine(reference_time.date(), time.min, tzinfo=reference_time.tzinfo)


def _is_before(due: datetime, floor: datetime) -> bool:
    # naive model timestamps are read in the reference time's zone
    if due.tzinfo is None and floor.tzinfo is not None:
        due = due.replace(tzinfo=floor.tzinfo)
    elif due.tzinfo is not None and floor.tzinfo is None:
        floor = floor.replace(tzinfo=due.tzinfo)
    return due < floor


def apply_due_date_check(
    candidates: List[ExtractionCandidate],
    reference_time: datetime,
    mode: DueDateCheck = DueDateCheck.OFF,
) -> List[ExtractionCandidate]:
    """Server-side sanity check of model-resolved due dates.

    ``OFF`` trusts the model. ``CLEAR_PAST`` drops due dates that fall before
    the start of the reference day; the candidate itself is kept.
    """
    if mode is DueDateCheck.OFF:
        return candidates

    floor = _start_of_day(reference_time)
    out = []
    for c in candidates:
        if c.due_date is not None and _is_before(c.due_date, floor):
            logger.warning(
                f"Clearing past due date {c.due_date.isoformat()} on candidate {c.title!r}"
            )
            c = c.model_copy(update={"due_date": None})
        out.append(c)
    return out
