from __future__ import annotations

from typing import Any, Callable, List

from fastapi import APIRouter, Depends, Path, Response, status

from category_api.core.deps import get_supplier_category_service, get_user_category_service
from category_api.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from category_api.schemas.common import ErrorResponse
from category_api.services.category import CategoryService

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid category data"},
    404: {"model": ErrorResponse, "description": "Category not found"},
    409: {"model": ErrorResponse, "description": "Version conflict; re-fetch and retry"},
}


# PUBLIC_INTERFACE
def build_category_router(
    *,
    prefix: str,
    tag: str,
    label: str,
    service_dep: Callable[..., Any],
) -> APIRouter:
    """
    Build the CRUD router for one category kind.

    Parameters:
        prefix: URL prefix, e.g. "/user-categories"
        tag: OpenAPI tag
        label: human label used in summaries, e.g. "user category"
        service_dep: dependency returning the CategoryService for this kind
    """
    router = APIRouter(prefix=prefix, tags=[tag], responses=_ERROR_RESPONSES)

    @router.post(
        "",
        response_model=CategoryRead,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {label}",
        description=f"Create a {label}. The response carries the initial version.",
    )
    async def create_category(
        payload: CategoryCreate,
        service: CategoryService = Depends(service_dep),
    ) -> CategoryRead:
        created = await service.create(payload)
        return CategoryRead.model_validate(created)

    @router.get(
        "",
        response_model=List[CategoryRead],
        summary=f"List {label} records",
        description=f"List every {label} in creation order.",
    )
    async def list_categories(
        service: CategoryService = Depends(service_dep),
    ) -> List[CategoryRead]:
        items = await service.list()
        return [CategoryRead.model_validate(x) for x in items]

    @router.get(
        "/{category_id}",
        response_model=CategoryRead,
        summary=f"Get {label}",
    )
    async def get_category(
        category_id: int = Path(..., ge=1),
        service: CategoryService = Depends(service_dep),
    ) -> CategoryRead:
        category = await service.get(category_id)
        return CategoryRead.model_validate(category)

    @router.put(
        "/{category_id}",
        response_model=CategoryRead,
        summary=f"Update {label}",
        description=(
            f"Replace name and description of a {label}. `version` must equal the stored "
            "version; otherwise 409 is returned and the client should re-fetch."
        ),
    )
    async def update_category(
        payload: CategoryUpdate,
        category_id: int = Path(..., ge=1),
        service: CategoryService = Depends(service_dep),
    ) -> CategoryRead:
        updated = await service.update(category_id, payload)
        return CategoryRead.model_validate(updated)

    @router.delete(
        "/{category_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        summary=f"Delete {label}",
    )
    async def delete_category(
        category_id: int = Path(..., ge=1),
        service: CategoryService = Depends(service_dep),
    ) -> Response:
        await service.delete(category_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


user_categories_router = build_category_router(
    prefix="/user-categories",
    tag="User Categories",
    label="user category",
    service_dep=get_user_category_service,
)

supplier_categories_router = build_category_router(
    prefix="/supplier-categories",
    tag="Supplier Categories",
    label="supplier category",
    service_dep=get_supplier_category_service,
)
