from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from category_api.db.session import get_async_session
from category_api.services.category import SupplierCategoryService, UserCategoryService


# PUBLIC_INTERFACE
async def get_user_category_service(
    session: AsyncSession = Depends(get_async_session),
) -> UserCategoryService:
    """Build the user-category service on the request-scoped session."""
    return UserCategoryService(session)


# PUBLIC_INTERFACE
async def get_supplier_category_service(
    session: AsyncSession = Depends(get_async_session),
) -> SupplierCategoryService:
    """Build the supplier-category service on the request-scoped session."""
    return SupplierCategoryService(session)
