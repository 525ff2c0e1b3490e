"""
Product Catalog Backend — Product SQLAlchemy Model
====================================================

What:  ORM model representing the `products` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by ProductService for CRUD operations and by the listing pipeline.

Table Design:
    - UUID primary key, generated client-side (works on PostgreSQL and SQLite)
    - user_id: identifier of the creating user; the only authorization input
    - name/price/image/fast_delivery/in_stock/rating: required catalog fields
    - qty: optional quantity
    - created_at/updated_at: UTC timestamps managed by the ORM

    Indexes cover the listing filters (owner, price sort, rating threshold).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    Represents a catalog product owned by a single user.

    Lifecycle:
        1. Created by an authenticated user (user_id = that user's id)
        2. Listed publicly through GET /api/products
        3. Read, updated and deleted only by the owner

    Query Patterns:
        - Listing: WHERE rating >= :r AND fast_delivery AND in_stock > 0
          AND lower(name) LIKE :q ORDER BY price LIMIT/OFFSET
        - Single product: WHERE id = :uuid (primary key lookup)
    """

    __tablename__ = "products"

    # ── Primary Key ───────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique product identifier",
    )

    # ── Owner ─────────────────────────────────────────────────────────────
    # Opaque user id taken from the access token; no users table lives here
    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Identifier of the user that created the product",
    )

    # ── Catalog Fields ────────────────────────────────────────────────────
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    image: Mapped[str] = mapped_column(
        String(2048),
        nullable=False,
        comment="Image URL",
    )
    fast_delivery: Mapped[bool] = mapped_column(Boolean, nullable=False)
    in_stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Units in stock; 0 means out of stock",
    )
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    qty: Mapped[Optional[float]] = mapped_column(Float, nullable=True, default=None)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this product was created (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this product was last modified (UTC)",
    )

    # ── Indexes ───────────────────────────────────────────────────────────
    __table_args__ = (
        Index("idx_products_user_id", "user_id"),
        Index("idx_products_price", "price"),
        Index("idx_products_rating", "rating"),
    )

    def is_owned_by(self, user_id: str) -> bool:
        """True when `user_id` is this product's owner."""
        return str(self.user_id) == str(user_id)

    def __repr__(self) -> str:
        return (
            f"<Product(id={self.id}, name='{self.name}', "
            f"user_id='{self.user_id}')>"
        )
