import logging
from dataclasses import dataclass
from typing import Optional

from extraction.date_checks import DueDateCheck
from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient
from services.auth_service import AuthService
from services.task_service import TaskService
from storage.db import Database
from storage.task_store import PostgresTaskStore
from storage.user_store import PostgresUserStore
from todo_ai.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Everything a request handler needs, built once per process.

    Stored on ``app.state.services`` and reached through api.dependencies.
    """

    settings: Settings
    task_service: TaskService
    auth_service: AuthService
    db: Optional[Database] = None

    async def close(self) -> None:
        if self.db is not None:
            await self.db.close()


async def build_services(settings: Settings) -> AppServices:
    db = Database(
        settings.database_url,
        min_size=settings.db_pool_min,
        max_size=settings.db_pool_max,
    )
    await db.connect()
    if settings.init_schema:
        await db.init_schema()

    extractor = TaskExtractor(
        LLMClient.from_settings(settings),
        due_date_check=DueDateCheck.parse(settings.due_date_check),
    )
    services = AppServices(
        settings=settings,
        task_service=TaskService(PostgresTaskStore(db), extractor),
        auth_service=AuthService(
            PostgresUserStore(db),
            jwt_secret=settings.jwt_secret,
            expiration_hours=settings.jwt_expiration_hours,
        ),
        db=db,
    )
    logger.info("Application services initialized")
    return services
