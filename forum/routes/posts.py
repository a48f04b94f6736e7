from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from forum.auth import Identity
from forum.constants.roles import Role
from forum.database import get_db
from forum.middleware.rate_limit import LimiterClass, rate_limit
from forum.middleware.rbac import require_identity, require_roles
from forum.schemas.post import PostCreate, PostResponse, ReplyCreate, ReplyResponse
from forum.services import post_service

router = APIRouter(tags=["Posts"])


@router.get("", response_model=list[PostResponse])
async def list_posts(
    category_id: int | None = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.list_posts(db, category_id=category_id, limit=limit, offset=offset)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, db: AsyncSession = Depends(get_db)):
    return await post_service.get_post(post_id, db)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(LimiterClass.POSTS))],
)
async def create_post(
    post: PostCreate,
    identity: Identity = Depends(require_identity()),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_post(post, int(identity.user_id), db)


@router.post(
    "/{post_id}/replies",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(LimiterClass.REPLIES))],
)
async def create_reply(
    post_id: int,
    reply: ReplyCreate,
    identity: Identity = Depends(require_identity()),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_reply(post_id, reply.content, int(identity.user_id), db)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(Role.GAME_MASTER, Role.ADMIN))],
)
async def delete_post(post_id: int, db: AsyncSession = Depends(get_db)):
    await post_service.delete_post(post_id, db)
