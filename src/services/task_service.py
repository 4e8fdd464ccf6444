import logging
import uuid
from datetime import datetime
from typing import Callable, List

from extraction.task_extractor import TaskExtractor
from extraction.translator import to_task
from storage.task_store import TaskStore
from todo_ai.errors import NotFoundOrUnauthorized, PersistenceError
from todo_ai.models import (
    CreateTaskIn,
    DroppedCandidate,
    ExtractionOutcome,
    Task,
    UpdateTaskIn,
    utcnow,
)

logger = logging.getLogger(__name__)


class TaskService:
    """Owner-scoped task operations plus the text-to-tasks pipeline."""

    def __init__(
        self,
        store: TaskStore,
        extractor: TaskExtractor,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.extractor = extractor
        self.clock = clock

    async def create(self, owner: uuid.UUID, data: CreateTaskIn) -> Task:
        now = self.clock()
        task = Task(
            user_id=owner,
            title=data.title,
            description=data.description,
            due_date=data.due_date,
            priority=data.priority,
            raw_text=data.raw_text,
            created_at=now,
            updated_at=now,
        )
        return await self.store.create(task)

    async def get_by_id(self, task_id: uuid.UUID, owner: uuid.UUID) -> Task:
        task = await self.store.get(task_id, owner)
        if task is None:
            raise NotFoundOrUnauthorized()
        return task

    async def list_by_owner(self, owner: uuid.UUID) -> List[Task]:
        return await self.store.list_by_owner(owner)

    async def update(self, task_id: uuid.UUID, owner: uuid.UUID, changes: UpdateTaskIn) -> Task:
        existing = await self.get_by_id(task_id, owner)
        updated = existing.model_copy(
            update={**changes.changes(), "updated_at": self.clock()}
        )
        saved = await self.store.update(updated)
        if saved is None:
            # deleted between the read and the write
            raise NotFoundOrUnauthorized()
        return saved

    async def delete(self, task_id: uuid.UUID, owner: uuid.UUID) -> None:
        if not await self.store.delete(task_id, owner):
            raise NotFoundOrUnauthorized()

    async def extract_and_create(self, text: str, owner: uuid.UUID) -> ExtractionOutcome:
        """Extract tasks from free text and store each one independently.

        Extraction failures propagate. A storage failure on one candidate only
        drops that candidate; the rest are still stored, in extraction order.
        """
        now = self.clock()
        candidates = await self.extractor.extract(text, reference_time=now)

        outcome = ExtractionOutcome()
        for index, candidate in enumerate(candidates):
            task = to_task(candidate, owner, text, now=now)
            try:
                outcome.created.append(await self.store.create(task))
            except PersistenceError as e:
                logger.warning(
                    f"Dropping extracted candidate {index} ({candidate.title!r}): {e}"
                )
                outcome.dropped.append(
                    DroppedCandidate(index=index, title=candidate.title, reason=str(e))
                )

        logger.info(
            f"Stored {len(outcome.created)}/{len(candidates)} extracted task(s) for user {owner}"
        )
        return outcome
