"""
Product Catalog Backend — Product Service (Business Logic)
============================================================

What:  The five product operations: list, get, create, update, delete.
How:   Each method performs the ownership rules and exactly one logical
       database operation through the request's AsyncSession.
Who:   Called by the route handlers in app/routes/products.py.
When:  Once per request.

Authorization:
    The authenticated user is an explicit `user` argument on every method
    that needs it. Ownership is a string equality check between user.id and
    Product.user_id; listing is public and takes no user.

Error Handling Strategy:
    - Unknown product (or malformed id)  → NotFoundError     (400)
    - No user / not the owner            → UnauthorizedError (401)
    - Missing name on create             → ValidationError   (400)
    - SQLAlchemy failure                 → DatabaseError     (500)
    Application errors propagate unchanged; nothing is retried.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import CurrentUser
from app.exceptions import DatabaseError, NotFoundError, UnauthorizedError, ValidationError
from app.models.product import Product
from app.schemas.product import (
    ProductCreate,
    ProductDeleteResponse,
    ProductListMetadata,
    ProductListResponse,
    ProductPage,
    ProductResponse,
    ProductUpdate,
)
from app.services.product_query import ProductListParams, build_pipeline

logger = logging.getLogger(__name__)


def _parse_product_id(product_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(product_id))
    except ValueError:
        raise NotFoundError(resource="product", resource_id=str(product_id))


class ProductService:
    """
    Business logic layer for product operations.

    Stateless: the session and the user arrive with each call.
    """

    async def list_products(
        self,
        db: AsyncSession,
        params: ProductListParams,
    ) -> ProductListResponse:
        """
        Filter, sort and paginate the catalog.

        Runs the count stage first; when nothing matches, the page query is
        skipped and the result is an empty page with totalCount 0.

        Args:
            db: Async database session
            params: Normalized listing options (see ProductListParams.from_query)

        Returns:
            ProductListResponse with metadata.totalCount and the page of products
        """
        pipeline = build_pipeline(params)
        try:
            count_result = await db.execute(pipeline.count_query())
            total_count = count_result.scalar() or 0

            products = []
            if total_count:
                result = await db.execute(pipeline.data_query())
                products = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.debug(
            "Listed %d of %d products (page=%d, page_size=%s)",
            len(products), total_count, params.page, params.page_size,
        )
        return ProductListResponse(
            products=ProductPage(
                metadata=ProductListMetadata(total_count=total_count),
                data=[ProductResponse.from_model(p) for p in products],
            ),
        )

    async def _get_owned_product(
        self,
        db: AsyncSession,
        product_id: str,
        user: Optional[CurrentUser],
    ) -> Product:
        """
        Loads a product and checks that `user` owns it.

        Order of checks: existence, then authentication, then ownership.

        Raises:
            NotFoundError: No product with this id
            UnauthorizedError: No user, or the user is not the owner
            DatabaseError: Query execution failed
        """
        pk = _parse_product_id(product_id)
        try:
            result = await db.execute(select(Product).where(Product.id == pk))
            product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": str(product_id)},
            ) from e

        if product is None:
            raise NotFoundError(resource="product", resource_id=str(product_id))

        if user is None:
            raise UnauthorizedError(message="User not found")

        if not product.is_owned_by(user.id):
            logger.warning(
                "User %s denied access to product %s owned by %s",
                user.id, product.id, product.user_id,
            )
            raise UnauthorizedError(
                message="User not authorized",
                context={"product_id": str(product.id)},
            )

        return product

    async def get_product(
        self,
        db: AsyncSession,
        product_id: str,
        user: Optional[CurrentUser],
    ) -> ProductResponse:
        """Return the full product document to its owner."""
        product = await self._get_owned_product(db, product_id, user)
        return ProductResponse.from_model(product)

    async def create_product(
        self,
        db: AsyncSession,
        payload: ProductCreate,
        user: Optional[CurrentUser],
    ) -> ProductResponse:
        """
        Persist a new product owned by `user`.

        Raises:
            ValidationError: Neither `name` nor `text` was provided
            UnauthorizedError: No authenticated user
            DatabaseError: Insert failed
        """
        name = payload.resolved_name()
        if name is None:
            raise ValidationError(message="Please add a name", field="name")

        if user is None:
            raise UnauthorizedError(message="User not found")

        product = Product(
            user_id=user.id,
            name=name,
            price=payload.price,
            image=payload.image,
            fast_delivery=payload.fast_delivery,
            in_stock=payload.in_stock,
            rating=payload.rating,
            qty=payload.qty,
        )
        try:
            db.add(product)
            await db.flush()  # Assigns id and timestamps without committing
        except SQLAlchemyError as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the product. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Product %s created by user %s", product.id, user.id)
        return ProductResponse.from_model(product)

    async def update_product(
        self,
        db: AsyncSession,
        product_id: str,
        payload: ProductUpdate,
        user: Optional[CurrentUser],
    ) -> ProductResponse:
        """
        Apply the fields present in `payload` to an owned product.

        Returns:
            The post-update document. An empty body leaves the product untouched.
        """
        product = await self._get_owned_product(db, product_id, user)

        changes = payload.changes()
        if not changes:
            return ProductResponse.from_model(product)

        for attr, value in changes.items():
            setattr(product, attr, value)
        product.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not update the product. Please try again.",
                context={"product_id": str(product_id)},
            ) from e

        logger.info("Product %s updated (%s)", product.id, ", ".join(sorted(changes)))
        return ProductResponse.from_model(product)

    async def delete_product(
        self,
        db: AsyncSession,
        product_id: str,
        user: Optional[CurrentUser],
    ) -> ProductDeleteResponse:
        """Remove an owned product and return its id."""
        product = await self._get_owned_product(db, product_id, user)

        try:
            await db.delete(product)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not delete the product. Please try again.",
                context={"product_id": str(product_id)},
            ) from e

        logger.info("Product %s deleted by user %s", product.id, user.id)
        return ProductDeleteResponse(id=product.id)


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
