import logging
import uuid

from fastapi import APIRouter, Depends

from api.dependencies import get_auth_service, get_current_user_id
from services.auth_service import AuthService
from todo_ai.models import CredentialsIn, TokenOut, User

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", status_code=201, response_model=User)
async def register(
    payload: CredentialsIn,
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Create an account. The password hash is never returned."""
    return await auth.register(payload.email, payload.password)


@router.post("/login", response_model=TokenOut)
async def login(
    payload: CredentialsIn,
    auth: AuthService = Depends(get_auth_service),
) -> TokenOut:
    return TokenOut(token=await auth.login(payload.email, payload.password))


@router.get("/me", response_model=User)
async def me(
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    return await auth.me(user_id)
