import uuid
from datetime import timedelta

import pytest

from extraction.task_extractor import TaskExtractor
from fakes import REFERENCE_TIME, InMemoryTaskStore, candidates_json
from llm.llm_client import LLMClient
from services.task_service import TaskService
from todo_ai.errors import (
    ExtractionParseError,
    ExtractionTransportError,
    NotFoundOrUnauthorized,
)
from todo_ai.models import CreateTaskIn, UpdateTaskIn

TEXT = "Buy milk and eggs tomorrow, call mom on Friday"


@pytest.mark.asyncio
async def test_extract_and_create_stores_every_candidate(fake_provider_factory, make_service, task_store):
    service = make_service(fake_provider_factory(candidates_json("Buy milk and eggs", "Call mom")))
    owner = uuid.uuid4()

    outcome = await service.extract_and_create(TEXT, owner)

    assert [t.title for t in outcome.created] == ["Buy milk and eggs", "Call mom"]
    assert outcome.dropped == []
    assert all(t.raw_text == TEXT for t in outcome.created)
    assert all(t.user_id == owner for t in outcome.created)
    assert len({t.id for t in outcome.created}) == 2
    assert len(task_store.rows) == 2


@pytest.mark.asyncio
async def test_no_candidates_is_an_empty_success(fake_provider_factory, make_service, task_store):
    service = make_service(fake_provider_factory("[]"))
    outcome = await service.extract_and_create("Nice weather today.", uuid.uuid4())
    assert outcome.created == []
    assert outcome.dropped == []
    assert task_store.rows == {}


@pytest.mark.asyncio
async def test_reference_time_comes_from_the_clock(fake_provider_factory, make_service):
    provider = fake_provider_factory("[]")
    await make_service(provider).extract_and_create(TEXT, uuid.uuid4())
    assert "November 19, 2025" in provider.calls[0]["system"]


@pytest.mark.asyncio
async def test_one_failed_candidate_is_dropped_and_order_kept(fake_provider_factory, make_service):
    store = InMemoryTaskStore(fail_titles={"B"})
    service = make_service(fake_provider_factory(candidates_json("A", "B", "C", "D")), store=store)

    outcome = await service.extract_and_create(TEXT, uuid.uuid4())

    assert [t.title for t in outcome.created] == ["A", "C", "D"]
    assert [(d.index, d.title) for d in outcome.dropped] == [(1, "B")]
    assert len(store.rows) == 3


@pytest.mark.asyncio
async def test_extraction_failures_propagate_and_store_nothing(fake_provider_factory, make_service, task_store):
    service = make_service(fake_provider_factory("not json at all"))
    with pytest.raises(ExtractionParseError):
        await service.extract_and_create(TEXT, uuid.uuid4())

    service = make_service(fake_provider_factory(error=ExtractionTransportError("down")))
    with pytest.raises(ExtractionTransportError):
        await service.extract_and_create(TEXT, uuid.uuid4())

    assert task_store.rows == {}


@pytest.mark.asyncio
async def test_null_due_date_is_stored_as_none(fake_provider_factory, make_service):
    service = make_service(fake_provider_factory('[{"title": "Call mom", "due_date": null}]'))
    (task,) = (await service.extract_and_create(TEXT, uuid.uuid4())).created
    assert task.due_date is None


@pytest.mark.asyncio
async def test_untitled_candidate_is_stored_with_the_rest(fake_provider_factory, make_service, task_store):
    service = make_service(fake_provider_factory('[{"title": "Buy milk"}, {"description": "call mom"}]'))

    outcome = await service.extract_and_create(TEXT, uuid.uuid4())

    assert [t.title for t in outcome.created] == ["Buy milk", ""]
    assert outcome.dropped == []
    assert len(task_store.rows) == 2


@pytest.mark.asyncio
async def test_crud_is_owner_scoped(fake_provider_factory, make_service):
    service = make_service(fake_provider_factory())
    alice, bob = uuid.uuid4(), uuid.uuid4()

    task = await service.create(alice, CreateTaskIn(title="Alice's task"))
    assert task.priority == "medium"
    assert task.raw_text == ""

    assert (await service.get_by_id(task.id, alice)).title == "Alice's task"
    assert await service.list_by_owner(bob) == []

    with pytest.raises(NotFoundOrUnauthorized):
        await service.get_by_id(task.id, bob)
    with pytest.raises(NotFoundOrUnauthorized):
        await service.update(task.id, bob, UpdateTaskIn(title="hijacked"))
    with pytest.raises(NotFoundOrUnauthorized):
        await service.delete(task.id, bob)

    assert (await service.get_by_id(task.id, alice)).title == "Alice's task"


@pytest.mark.asyncio
async def test_update_is_partial_and_refreshes_updated_at(fake_provider_factory, task_store):
    ticks = iter([REFERENCE_TIME, REFERENCE_TIME + timedelta(minutes=5)])
    service = TaskService(
        task_store,
        TaskExtractor(LLMClient(provider=fake_provider_factory())),
        clock=lambda: next(ticks),
    )
    owner = uuid.uuid4()
    task = await service.create(owner, CreateTaskIn(title="Write report", description="Q4", priority="low"))

    updated = await service.update(task.id, owner, UpdateTaskIn(completed=True))

    assert updated.completed is True
    assert updated.title == "Write report"
    assert updated.description == "Q4"
    assert updated.priority == "low"
    assert updated.user_id == owner
    assert updated.created_at == REFERENCE_TIME
    assert updated.updated_at == REFERENCE_TIME + timedelta(minutes=5)


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(fake_provider_factory, make_service):
    service = make_service(fake_provider_factory())
    owner = uuid.uuid4()
    task = await service.create(owner, CreateTaskIn(title="Temp"))

    await service.delete(task.id, owner)

    with pytest.raises(NotFoundOrUnauthorized):
        await service.get_by_id(task.id, owner)
    with pytest.raises(NotFoundOrUnauthorized):
        await service.delete(task.id, owner)
