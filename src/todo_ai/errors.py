from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    EXTRACTION_TRANSPORT = "extraction_transport"
    EXTRACTION_PARSE = "extraction_parse"
    PERSISTENCE = "persistence"
    NOT_FOUND_OR_UNAUTHORIZED = "not_found_or_unauthorized"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHENTICATED = "unauthenticated"
    USER_ALREADY_EXISTS = "user_already_exists"


class TodoError(Exception):
    """Base class for every failure the service reports to its callers.

    Callers branch on the exception type (or ``kind``), never on the message.
    """

    kind: ErrorKind
    default_message = "internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ExtractionError(TodoError):
    """The extraction client could not produce a candidate list."""


class ExtractionTransportError(ExtractionError):
    kind = ErrorKind.EXTRACTION_TRANSPORT
    default_message = "language model provider unavailable"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ExtractionParseError(ExtractionError):
    kind = ErrorKind.EXTRACTION_PARSE
    default_message = "language model response could not be parsed"

    def __init__(self, message: Optional[str] = None, payload: Optional[str] = None):
        super().__init__(message)
        self.payload = payload
        # Callers that choose to degrade treat this as the candidate list.
        self.candidates: list = []


class PersistenceError(TodoError):
    kind = ErrorKind.PERSISTENCE
    default_message = "storage error"


class NotFoundOrUnauthorized(TodoError):
    kind = ErrorKind.NOT_FOUND_OR_UNAUTHORIZED
    default_message = "task not found or unauthorized"


class InvalidCredentials(TodoError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "invalid credentials"


class Unauthenticated(TodoError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "unauthorized"


class UserAlreadyExists(TodoError):
    kind = ErrorKind.USER_ALREADY_EXISTS
    default_message = "user already exists"
