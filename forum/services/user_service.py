import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.constants.roles import Role
from forum.exceptions import UserNotFoundError
from forum.models.user import User

logger = logging.getLogger(__name__)


async def get_user(user_id: int, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalars().first()
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def change_role(user_id: int, role: Role, db: AsyncSession) -> User:
    user = await get_user(user_id, db)
    previous = user.role
    user.role = Role(role).value
    await db.commit()
    await db.refresh(user)
    logger.info(f"Changed role of user {user_id} from {previous} to {user.role}")
    return user
