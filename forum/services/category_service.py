from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.exceptions import CategoryNotFoundError, DuplicateResourceError, ValidationError
from forum.models.category import Category
from forum.schemas.category import CategoryCreate, CategoryUpdate
from forum.utils.sanitize import sanitize_plain_text
from forum.utils.slugify import slugify


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def get_category(category_id: int, db: AsyncSession) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)
    return category


async def create_category(data: CategoryCreate, db: AsyncSession) -> Category:
    name = sanitize_plain_text(data.name)
    slug = slugify(data.slug or name)
    if not slug:
        raise ValidationError("Category name must contain letters or digits", field="name")
    result = await db.execute(select(Category).where(Category.slug == slug))
    if result.scalars().first():
        raise DuplicateResourceError("Category", "slug", slug)

    category = Category(name=name, slug=slug, description=sanitize_plain_text(data.description) or None)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def update_category(category_id: int, data: CategoryUpdate, db: AsyncSession) -> Category:
    category = await get_category(category_id, db)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name"):
        category.name = sanitize_plain_text(changes["name"]) or category.name
    if "description" in changes:
        category.description = sanitize_plain_text(changes["description"]) or None
    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(category_id: int, db: AsyncSession) -> None:
    category = await get_category(category_id, db)
    await db.delete(category)
    await db.commit()
