"""Create products table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `products` table and the indexes used by the listing filters.
Rollback: downgrade() drops the table (all product data is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the products table; column docs live in app/models/product.py."""
    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Unique product identifier"),
        sa.Column(
            "user_id",
            sa.String(64),
            nullable=False,
            comment="Identifier of the user that created the product",
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("image", sa.String(2048), nullable=False, comment="Image URL"),
        sa.Column("fast_delivery", sa.Boolean(), nullable=False),
        sa.Column(
            "in_stock",
            sa.Integer(),
            nullable=False,
            comment="Units in stock; 0 means out of stock",
        ),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("qty", sa.Float(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this product was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this product was last modified (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index("idx_products_user_id", "products", ["user_id"])
    op.create_index("idx_products_price", "products", ["price"])
    op.create_index("idx_products_rating", "products", ["rating"])


def downgrade() -> None:
    """Drop the products table and its indexes."""
    op.drop_index("idx_products_rating", table_name="products")
    op.drop_index("idx_products_price", table_name="products")
    op.drop_index("idx_products_user_id", table_name="products")
    op.drop_table("products")
