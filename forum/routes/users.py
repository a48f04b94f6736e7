import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from forum.auth import Identity
from forum.constants.cookies import CookieCategory
from forum.constants.roles import Role
from forum.consent.writer import ConsentWriter
from forum.database import get_db
from forum.middleware.consent import get_consent_writer
from forum.middleware.rbac import require_identity, require_roles
from forum.schemas.user import RoleUpdate, ThemeUpdate, UserResponse
from forum.services import user_service

router = APIRouter(tags=["Users"])

logger = logging.getLogger(__name__)

THEME_COOKIE = "cookie-functional"


@router.get("/me", response_model=UserResponse)
async def read_current_user(
    identity: Identity = Depends(require_identity()),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_user(int(identity.user_id), db)


@router.put("/me/theme")
async def update_theme(
    body: ThemeUpdate,
    response: Response,
    identity: Identity = Depends(require_identity()),
    writer: ConsentWriter = Depends(get_consent_writer),
):
    """
    Remember the display theme in a functional cookie.

    The cookie is only written when the visitor accepted functional
    cookies; the theme is still applied for the current response.
    """
    persisted = writer.attempt_set_cookie(THEME_COOKIE, body.theme, CookieCategory.FUNCTIONAL)
    writer.apply(response)
    return {"theme": body.theme, "persisted": persisted}


@router.put("/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: int,
    update: RoleUpdate,
    admin: Identity = Depends(require_roles(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Admin {admin.user_id} changing role of user {user_id} to {update.role.value}")
    return await user_service.change_role(user_id, update.role, db)
