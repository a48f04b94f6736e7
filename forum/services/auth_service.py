import logging

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.auth import create_access_token, hash_password, verify_password
from forum.constants.roles import DEFAULT_ROLE, normalize_role
from forum.exceptions import AccountBannedError, DuplicateResourceError, InvalidCredentialsError
from forum.models.user import User

logger = logging.getLogger(__name__)


async def register_user(username: str, email: str, password: str, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(or_(User.email == email.lower(), User.username == username)))
    existing = result.scalars().first()
    if existing:
        if existing.email == email.lower():
            raise DuplicateResourceError("User", "email", email)
        raise DuplicateResourceError("User", "username", username)

    new_user = User(
        username=username,
        email=email.lower(),
        hashed_password=hash_password(password),
        role=DEFAULT_ROLE.value,
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    logger.info(f"Registered user {new_user.id} ({username})")
    return new_user


async def authenticate_user(email: str, password: str, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalars().first()
    if not user or not verify_password(password, user.hashed_password):
        logger.info(f"Failed login for {email}")
        raise InvalidCredentialsError()
    if user.banned:
        raise AccountBannedError()
    return user


def issue_token(user: User) -> str:
    role = normalize_role(user.role) or DEFAULT_ROLE
    return create_access_token({"sub": user.id, "username": user.username, "role": role.value})
