"""
Identity provider

Turns request credentials into an :class:`Identity`. Tokens are HS256 JWTs
carrying the user id (``sub``), username and role. Role labels are
normalised here, once, so legacy spellings never reach business logic.

:func:`get_optional_identity` trusts the token alone and is what admission
control keys on. :func:`get_current_identity` also checks the stored account
and is what the access gate uses.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from forum.config import settings
from forum.constants.roles import Role, normalize_role
from forum.database import get_db
from forum.models.user import User

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_COOKIE = "token"


@dataclass(frozen=True)
class Identity:
    user_id: str
    username: str | None = None
    role: Role | None = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed access token.

    Args:
        data: Claims to encode; must include ``sub``
        expires_delta: Lifetime of the token (defaults to the configured one)

    Returns:
        str: Encoded JWT
    """
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (user id) in token data.")
    to_encode["sub"] = str(to_encode["sub"])

    if isinstance(to_encode.get("role"), Role):
        to_encode["role"] = to_encode["role"].value

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def identity_from_token(token: str) -> Identity | None:
    """Decode a token into an identity, or None when it cannot be trusted."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        logger.info("Ignoring expired access token")
        return None
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        return None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Token is missing 'sub' claim")
        return None

    role = normalize_role(payload.get("role"))
    if role is None:
        logger.warning(f"Token for user {user_id} carries unknown role {payload.get('role')!r}")
    return Identity(user_id=str(user_id), username=payload.get("username"), role=role)


def extract_token(request: Request) -> str | None:
    """Bearer token from the Authorization header, else the ``token`` cookie."""
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()
        return token or None
    return request.cookies.get(TOKEN_COOKIE) or None


async def get_optional_identity(request: Request) -> Identity | None:
    """
    Resolve the identity attached to the request, if any.

    Never fails: missing, malformed and expired credentials all resolve to
    an anonymous request. The access gate decides what that means.
    """
    token = extract_token(request)
    identity = identity_from_token(token) if token else None
    request.state.identity = identity
    return identity


async def load_identity(identity: Identity | None, db: AsyncSession) -> Identity | None:
    """
    Re-check a token identity against the stored account.

    The account's current role wins over the role claim, so promotions and
    demotions apply to tokens already issued. Banned or deleted accounts
    resolve to an anonymous request.
    """
    if identity is None:
        return None
    try:
        user = await db.get(User, int(identity.user_id))
    except ValueError:
        logger.warning(f"Token subject {identity.user_id!r} is not a user id")
        return None

    if user is None:
        logger.info(f"Token for deleted user {identity.user_id} ignored")
        return None
    if user.banned:
        logger.info(f"Token for banned user {user.id} ignored")
        return None
    return Identity(user_id=str(user.id), username=user.username, role=normalize_role(user.role))


async def get_current_identity(
    request: Request,
    identity: Identity | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
) -> Identity | None:
    """Identity backed by the stored account, for the access gate."""
    current = await load_identity(identity, db)
    request.state.identity = current
    return current
