import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.state import AppServices
from services.auth_service import AuthService
from services.task_service import TaskService
from todo_ai.errors import Unauthenticated

bearer = HTTPBearer(auto_error=False)


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_task_service(services: AppServices = Depends(get_services)) -> TaskService:
    return services.task_service


def get_auth_service(services: AppServices = Depends(get_services)) -> AuthService:
    return services.auth_service


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> uuid.UUID:
    """Identity of the caller, taken from the bearer token as-is."""
    if credentials is None:
        raise Unauthenticated()
    return auth.decode_token(credentials.credentials)
