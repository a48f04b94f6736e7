import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from forum.constants.roles import normalize_role
from forum.database import get_db
from forum.middleware.rate_limit import LimiterClass, rate_limit
from forum.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from forum.services.auth_service import authenticate_user, issue_token, register_user

router = APIRouter(tags=["Auth"])

logger = logging.getLogger(__name__)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    return await register_user(user.username, user.email, user.password, db)


@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(rate_limit(LimiterClass.LOGIN))],
)
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Exchange credentials for a bearer token.

    Every attempt spends a login point, successful or not.
    """
    user = await authenticate_user(credentials.email, credentials.password, db)
    logger.info(f"User {user.id} logged in")
    return TokenResponse(access_token=issue_token(user), role=normalize_role(user.role))
