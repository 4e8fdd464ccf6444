import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional

import asyncpg

from storage.db import Database, storage_errors
from todo_ai.errors import UserAlreadyExists
from todo_ai.models import User

logger = logging.getLogger(__name__)


class UserStore(ABC):
    @abstractmethod
    async def create(self, user: User) -> User: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]: ...


def _user_from_record(record) -> User:
    return User(
        id=record["id"],
        email=record["email"],
        password_hash=record["password_hash"],
        created_at=record["created_at"],
    )


class PostgresUserStore(UserStore):
    def __init__(self, db: Database):
        self.db = db

    async def create(self, user: User) -> User:
        query = """
            INSERT INTO users (id, email, password_hash, created_at)
            VALUES ($1, $2, $3, $4)
            RETURNING id, email, password_hash, created_at
        """
        async with storage_errors("create user"):
            try:
                record = await self.db.fetchrow(
                    query, user.id, user.email, user.password_hash, user.created_at
                )
            except asyncpg.UniqueViolationError as e:
                raise UserAlreadyExists() from e
        logger.info(f"Registered user {user.id}")
        return _user_from_record(record)

    async def get_by_email(self, email: str) -> Optional[User]:
        query = "SELECT id, email, password_hash, created_at FROM users WHERE email = $1"
        async with storage_errors("fetch user"):
            record = await self.db.fetchrow(query, email)
        return _user_from_record(record) if record else None

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        query = "SELECT id, email, password_hash, created_at FROM users WHERE id = $1"
        async with storage_errors("fetch user"):
            record = await self.db.fetchrow(query, user_id)
        return _user_from_record(record) if record else None
