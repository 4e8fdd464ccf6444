import logging
import uuid
from datetime import datetime, timedelta, timezone

from extraction.translator import normalise_priority, to_task
from fakes import REFERENCE_TIME
from llm.schemas import ExtractionCandidate

OWNER = uuid.uuid4()
SOURCE = "Buy milk and eggs tomorrow, call mom on Friday"


def test_translates_candidate_into_owned_task():
    due = datetime(2025, 11, 20, 8, 0, tzinfo=timezone.utc)
    candidate = ExtractionCandidate(
        title="Buy milk and eggs",
        description="Groceries",
        due_date=due,
        priority="high",
        subtasks=["milk", "eggs"],
    )
    task = to_task(candidate, OWNER, SOURCE, now=REFERENCE_TIME)

    assert task.user_id == OWNER
    assert task.title == "Buy milk and eggs"
    assert task.description == "Groceries"
    assert task.priority == "high"
    assert task.due_date == due
    assert task.raw_text == SOURCE
    assert task.completed is False
    assert task.created_at == task.updated_at == REFERENCE_TIME


def test_each_translation_gets_a_fresh_id():
    candidate = ExtractionCandidate(title="Call mom")
    a = to_task(candidate, OWNER, SOURCE)
    b = to_task(candidate, OWNER, SOURCE)
    assert a.id != b.id


def test_absent_due_date_stays_absent():
    task = to_task(ExtractionCandidate(title="Call mom"), OWNER, SOURCE)
    assert task.due_date is None


def test_offset_due_date_is_not_converted():
    plus_two = timezone(timedelta(hours=2))
    due = datetime(2025, 11, 21, 18, 0, tzinfo=plus_two)
    task = to_task(ExtractionCandidate(title="Call mom", due_date=due), OWNER, SOURCE)
    assert task.due_date == due
    assert task.due_date.utcoffset() == timedelta(hours=2)


def test_naive_due_date_is_read_as_utc():
    naive = datetime(2025, 11, 21, 18, 0)
    task = to_task(ExtractionCandidate(title="Call mom", due_date=naive), OWNER, SOURCE)
    assert task.due_date == datetime(2025, 11, 21, 18, 0, tzinfo=timezone.utc)
    assert task.due_date.utcoffset() == timedelta(0)


def test_unexpected_priority_is_coerced_and_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="extraction.translator"):
        task = to_task(ExtractionCandidate(title="x", priority="URGENT"), OWNER, SOURCE)
    assert task.priority == "medium"
    assert "URGENT" in caplog.text


def test_priority_is_normalised():
    assert normalise_priority(" High ") == "high"
    assert normalise_priority("low") == "low"
    assert normalise_priority("") == "medium"
