import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from storage.user_store import UserStore
from todo_ai.errors import InvalidCredentials, Unauthenticated, UserAlreadyExists
from todo_ai.models import User

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password securely."""
    return _pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its hash."""
    return _pwd_context.verify(password, hashed)


class AuthService:
    def __init__(self, users: UserStore, jwt_secret: str, expiration_hours: int = 72):
        self.users = users
        self.jwt_secret = jwt_secret
        self.expiration_hours = expiration_hours

    async def register(self, email: str, password: str) -> User:
        if await self.users.get_by_email(email) is not None:
            raise UserAlreadyExists()
        user = User(email=email, password_hash=hash_password(password))
        return await self.users.create(user)

    async def login(self, email: str, password: str) -> str:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Rejected login attempt")
            raise InvalidCredentials()
        return self.create_token(user.id)

    def create_token(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "user_id": str(user_id),
            "iat": now,
            "exp": now + timedelta(hours=self.expiration_hours),
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> uuid.UUID:
        """Return the user id carried by ``token``."""
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("token has expired") from None
        except jwt.InvalidTokenError:
            raise Unauthenticated("invalid token") from None

        try:
            return uuid.UUID(str(payload["user_id"]))
        except (KeyError, ValueError):
            raise Unauthenticated("invalid token") from None

    async def me(self, user_id: uuid.UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise Unauthenticated("user not found")
        return user
