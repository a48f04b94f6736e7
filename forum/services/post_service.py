import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.exceptions import PostNotFoundError, ValidationError
from forum.models.post import Post, Reply
from forum.schemas.post import PostCreate
from forum.services.category_service import get_category
from forum.utils.sanitize import sanitize_plain_text, sanitize_post_body

logger = logging.getLogger(__name__)


async def list_posts(db: AsyncSession, category_id: int | None = None, limit: int = 20, offset: int = 0) -> list[Post]:
    query = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
    if category_id is not None:
        query = query.where(Post.category_id == category_id)
    result = await db.execute(query.limit(limit).offset(offset))
    return list(result.unique().scalars().all())


async def get_post(post_id: int, db: AsyncSession) -> Post:
    post = await db.get(Post, post_id)
    if post is None:
        raise PostNotFoundError(post_id)
    return post


async def create_post(data: PostCreate, author_id: int, db: AsyncSession) -> Post:
    if data.category_id is not None:
        await get_category(data.category_id, db)

    title = sanitize_plain_text(data.title)
    content = sanitize_post_body(data.content)
    if not title or not content:
        raise ValidationError("Post title and content cannot be empty")

    post = Post(title=title, content=content, category_id=data.category_id, author_id=author_id)
    db.add(post)
    await db.commit()
    await db.refresh(post)
    logger.info(f"User {author_id} created post {post.id}")
    return post


async def create_reply(post_id: int, content: str, author_id: int, db: AsyncSession) -> Reply:
    await get_post(post_id, db)
    content = sanitize_post_body(content)
    if not content:
        raise ValidationError("Reply content cannot be empty", field="content")

    reply = Reply(post_id=post_id, content=content, author_id=author_id)
    db.add(reply)
    await db.commit()
    await db.refresh(reply)
    return reply


async def delete_post(post_id: int, db: AsyncSession) -> None:
    post = await get_post(post_id, db)
    await db.delete(post)
    await db.commit()
    logger.info(f"Deleted post {post_id}")
