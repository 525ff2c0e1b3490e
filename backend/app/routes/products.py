"""
Product Catalog Backend — Products Route Handlers
===================================================

What:  HTTP surface of the products resource.
How:   Extracts query/path/body data, resolves the caller through the auth
       dependency, delegates to ProductService, returns JSON.

Routes:
    GET    /api/products        list (public)
    POST   /api/products        create (auth)
    GET    /api/products/{id}   get by id (auth, owner only)
    PUT    /api/products/{id}   partial update (auth, owner only)
    DELETE /api/products/{id}   delete (auth, owner only)
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import CurrentUser, get_current_user
from app.config import settings
from app.database import get_db_session
from app.schemas.product import (
    ErrorResponse,
    ProductCreate,
    ProductDeleteResponse,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from app.services.product_query import ProductListParams
from app.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Products"])

_OWNER_ERRORS = {
    400: {"description": "Product not found", "model": ErrorResponse},
    401: {"description": "Missing token or not the owner", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


@router.get(
    "/products",
    response_model=ProductListResponse,
    responses={
        400: {"description": "Invalid pagination parameters", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List products with filtering, sorting and pagination",
)
async def get_products(
    response: Response,
    sort: str | None = Query(
        default=None,
        description="'lowtohigh' for price ascending; any other value sorts by price descending",
    ),
    by_stock: str | None = Query(
        default=None, alias="byStock",
        description="'false' excludes out-of-stock products",
    ),
    by_fast_delivery: str | None = Query(
        default=None, alias="byFastDelivery",
        description="'true' keeps only fast-delivery products",
    ),
    by_rating: str | None = Query(
        default=None, alias="byRating",
        description="Minimum rating (ignored unless > 0)",
    ),
    items_per_page: str | None = Query(
        default=None, alias="itemsPerPage",
        description="Page size; omit or 0 for no limit",
    ),
    page_num: str | None = Query(
        default=None, alias="pageNum",
        description="Zero-based page number",
    ),
    search_query: str | None = Query(
        default=None, alias="searchQuery",
        description="Case-insensitive substring of the product name",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> ProductListResponse:
    """
    List products. No authentication required.

    Example:
        GET /api/products?sort=lowtohigh&byRating=4&itemsPerPage=2&pageNum=1
    """
    params = ProductListParams.from_query(
        sort=sort,
        by_stock=by_stock,
        by_fast_delivery=by_fast_delivery,
        by_rating=by_rating,
        items_per_page=items_per_page,
        page_num=page_num,
        search_query=search_query,
        max_items_per_page=settings.max_items_per_page,
    )
    result = await product_service.list_products(db=db, params=params)

    response.headers["X-Total-Count"] = str(result.products.metadata.total_count)
    return result


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing name or invalid fields", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a product owned by the caller",
)
async def add_product(
    payload: ProductCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.create_product(db=db, payload=payload, user=user)


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses=_OWNER_ERRORS,
    summary="Get a product by id",
)
async def get_product_by_id(
    product_id: str,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    """
    Get the full product document. Only the owner may read it.

    Caching:
        Cache-Control: private, no-cache (owner-specific and mutable).
    """
    result = await product_service.get_product(db=db, product_id=product_id, user=user)
    response.headers["Cache-Control"] = "private, no-cache"
    return result


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses=_OWNER_ERRORS,
    summary="Partially update a product",
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.update_product(
        db=db, product_id=product_id, payload=payload, user=user,
    )


@router.delete(
    "/products/{product_id}",
    response_model=ProductDeleteResponse,
    responses=_OWNER_ERRORS,
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProductDeleteResponse:
    return await product_service.delete_product(db=db, product_id=product_id, user=user)
