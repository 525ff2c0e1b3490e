"""
Product Catalog Backend — Pydantic Request/Response Schemas
=============================================================

What:  Pydantic models defining the API contract for the products endpoints.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate the OpenAPI documentation.
Who:   Used by route handlers as request/response types and by ProductService.

Wire format:
    Field names on the wire are camelCase (`fastDelivery`, `inStock`,
    `createdAt`), matching the listing query parameters. Python attributes
    stay snake_case; `populate_by_name` lets services build models either way.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# products.in_stock is a 32-bit INTEGER column
MAX_IN_STOCK = 2_147_483_647


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class ProductResponse(BaseModel):
    """
    What:  Full representation of a product document.
    Who:   Returned by GET/PUT /api/products/{id}, POST /api/products and
           as the items of the listing page.
    """
    id: uuid.UUID = Field(description="Unique product identifier (UUID)")
    user_id: str = Field(alias="user", description="Identifier of the owning user")
    name: str = Field(description="Product name")
    price: float = Field(description="Unit price")
    image: str = Field(description="Image URL")
    fast_delivery: bool = Field(alias="fastDelivery", description="Eligible for fast delivery")
    in_stock: int = Field(alias="inStock", description="Units in stock")
    rating: float = Field(description="Average rating")
    qty: Optional[float] = Field(default=None, description="Optional quantity")
    created_at: datetime = Field(alias="createdAt", description="Creation timestamp (UTC)")
    updated_at: datetime = Field(alias="updatedAt", description="Last update timestamp (UTC)")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @classmethod
    def from_model(cls, product) -> "ProductResponse":
        """Builds the response from a Product ORM instance."""
        return cls(
            id=product.id,
            user_id=product.user_id,
            name=product.name,
            price=product.price,
            image=product.image,
            fast_delivery=product.fast_delivery,
            in_stock=product.in_stock,
            rating=product.rating,
            qty=product.qty,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductListMetadata(BaseModel):
    """Facet metadata: how many products match the filters, ignoring pagination."""
    total_count: int = Field(alias="totalCount", ge=0)

    model_config = ConfigDict(populate_by_name=True)


class ProductPage(BaseModel):
    """One page of listing results plus the total match count."""
    metadata: ProductListMetadata
    data: List[ProductResponse] = Field(default_factory=list)


class ProductListResponse(BaseModel):
    """
    What:  Response of GET /api/products.

    Example:
        {
            "success": true,
            "products": {
                "metadata": {"totalCount": 5},
                "data": [{"id": "...", "name": "Kettle", ...}]
            }
        }
    """
    success: bool = True
    products: ProductPage


class ProductDeleteResponse(BaseModel):
    """Response of DELETE /api/products/{id}: the removed identifier."""
    success: bool = True
    id: uuid.UUID


# ══════════════════════════════════════════════════════════════════════════
# Request Models: what the client sends in the body
# ══════════════════════════════════════════════════════════════════════════


class ProductCreate(BaseModel):
    """
    What:  Body of POST /api/products.

    `name` is optional here so that ProductService can answer a missing name
    with a 400 "Please add a name". `text` is accepted as a legacy alias
    for the name.
    """
    name: Optional[str] = Field(default=None, max_length=255)
    text: Optional[str] = Field(default=None, max_length=255)
    price: float
    image: str = Field(min_length=1, max_length=2048)
    fast_delivery: bool = Field(alias="fastDelivery")
    in_stock: int = Field(alias="inStock", ge=0, le=MAX_IN_STOCK)
    rating: float = Field(ge=0)
    qty: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True)

    def resolved_name(self) -> Optional[str]:
        """The product name, falling back to `text`; None when both are blank."""
        for candidate in (self.name, self.text):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


class ProductUpdate(BaseModel):
    """
    What:  Body of PUT /api/products/{id}.

    Every field is optional; only fields present in the body are applied.
    Owner, id and timestamps are not part of the model and cannot be written.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[float] = None
    image: Optional[str] = Field(default=None, min_length=1, max_length=2048)
    fast_delivery: Optional[bool] = Field(default=None, alias="fastDelivery")
    in_stock: Optional[int] = Field(default=None, alias="inStock", ge=0, le=MAX_IN_STOCK)
    rating: Optional[float] = Field(default=None, ge=0)
    qty: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "price", "image", "fast_delivery", "in_stock", "rating")
    @classmethod
    def reject_null(cls, v):
        """Required product fields may be omitted but never set to null."""
        if v is None:
            raise ValueError("field is required and cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        """Names are stored stripped; a blank name is rejected like on create."""
        if v is None:
            return v
        stripped = v.strip()
        if not stripped:
            raise ValueError("Please add a name")
        return stripped

    def changes(self) -> dict:
        """Fields explicitly sent by the client, keyed by model attribute name."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "Product not found",
            "request_id": "550e8400"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
