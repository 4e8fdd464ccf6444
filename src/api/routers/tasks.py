import asyncio
import logging
import uuid
from typing import Awaitable, List, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.dependencies import get_current_user_id, get_task_service
from api.metrics import CANDIDATES_DROPPED_TOTAL, TASKS_EXTRACTED_TOTAL
from services.task_service import TaskService
from todo_ai.models import CreateTaskIn, ExtractTasksIn, Task, UpdateTaskIn

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)

T = TypeVar("T")

DISCONNECT_POLL_S = 0.25
# nginx's "client closed request"; nobody reads it, it only shows up in logs
CLIENT_CLOSED_REQUEST = 499


def _parse_task_id(task_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(task_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid task ID") from None


async def _until_disconnect(request: Request, work: Awaitable[T]) -> Optional[T]:
    """Run ``work`` but cancel it as soon as the client goes away.

    Returns None when the client disconnected first.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_S)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling in-flight extraction")
                task.cancel()
                return None
    finally:
        if not task.done():
            task.cancel()


@router.get("", response_model=List[Task])
async def list_tasks(
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> List[Task]:
    return await service.list_by_owner(user_id)


@router.post("", status_code=201, response_model=Task)
async def create_task(
    payload: CreateTaskIn,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    return await service.create(user_id, payload)


@router.post("/from-text", status_code=201, response_model=List[Task])
async def extract_tasks_from_text(
    payload: ExtractTasksIn,
    request: Request,
    response: Response,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """Turn free-form text into stored tasks via the language model."""
    logger.info(f"Extracting tasks from text: {payload.text[:50]}...")

    outcome = await _until_disconnect(
        request, service.extract_and_create(payload.text, user_id)
    )
    if outcome is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)

    TASKS_EXTRACTED_TOTAL.inc(len(outcome.created))
    if outcome.dropped:
        CANDIDATES_DROPPED_TOTAL.inc(len(outcome.dropped))

    response.headers["X-Dropped-Candidates"] = str(len(outcome.dropped))
    return outcome.created


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    return await service.get_by_id(_parse_task_id(task_id), user_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    payload: UpdateTaskIn,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    return await service.update(_parse_task_id(task_id), user_id, payload)


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
) -> Response:
    await service.delete(_parse_task_id(task_id), user_id)
    return Response(status_code=204)
