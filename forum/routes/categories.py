from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from forum.constants.roles import Role
from forum.database import get_db
from forum.middleware.rbac import require_roles
from forum.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from forum.services import category_service

router = APIRouter(tags=["Categories"])

admin_only = require_roles(Role.ADMIN)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await category_service.list_categories(db)


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admin_only)],
)
async def create_category(category: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await category_service.create_category(category, db)


@router.put("/{category_id}", response_model=CategoryResponse, dependencies=[Depends(admin_only)])
async def update_category(category_id: int, category: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await category_service.update_category(category_id, category, db)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(admin_only)],
)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await category_service.delete_category(category_id, db)
