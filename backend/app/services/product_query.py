"""
Product Catalog Backend — Listing Query Pipeline
==================================================

What:  Turns the optional listing query parameters into an ordered set of
       query stages and composes them into SQLAlchemy statements.
How:   ProductListParams normalizes the raw query strings; build_pipeline()
       returns a ProductPipeline holding, in a fixed order:

           filters     rating → fast delivery → stock → name search
           sort        price (asc/desc), then created_at, id
           paginate    offset = page * page_size, limit = page_size

       data_query() applies all three; count_query() applies the filters
       only, so together they produce the facet result (total + page).
Who:   Used by ProductService.list_products().
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from sqlalchemy import Select, asc, desc, func, select
from sqlalchemy.sql.elements import ColumnElement

from app.exceptions import ValidationError
from app.models.product import Product


class PriceSort(str, Enum):
    ASCENDING = "lowtohigh"
    DESCENDING = "hightolow"


LIKE_ESCAPE = "\\"

# Largest OFFSET a signed 64-bit bind parameter can carry
MAX_OFFSET = 2**63 - 1


def _parse_non_negative_int(raw: Optional[str], name: str) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message=f"{name} must be a whole number", field=name)
    if value < 0:
        raise ValidationError(message=f"{name} cannot be negative", field=name)
    return value


def _parse_rating(raw: Optional[str]) -> Optional[float]:
    # Non-numeric and non-positive ratings disable the filter
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class ProductListParams:
    """
    Normalized listing options.

    Attributes:
        sort:               PriceSort or None (insertion order)
        min_rating:         keep rating >= min_rating when set
        in_stock_only:      keep in_stock > 0
        fast_delivery_only: keep fast_delivery == True
        search_text:        case-insensitive substring of name
        page:               zero-based page number
        page_size:          items per page; None means no limit
    """
    sort: Optional[PriceSort] = None
    min_rating: Optional[float] = None
    in_stock_only: bool = False
    fast_delivery_only: bool = False
    search_text: Optional[str] = None
    page: int = 0
    page_size: Optional[int] = None

    @classmethod
    def from_query(
        cls,
        sort: Optional[str] = None,
        by_stock: Optional[str] = None,
        by_fast_delivery: Optional[str] = None,
        by_rating: Optional[str] = None,
        items_per_page: Optional[str] = None,
        page_num: Optional[str] = None,
        search_query: Optional[str] = None,
        max_items_per_page: Optional[int] = None,
    ) -> "ProductListParams":
        """
        Builds params from the raw query-string values of GET /api/products.

        Flag semantics:
            sort=lowtohigh        → price ascending; any other value → descending
            byStock=false         → only products with inStock > 0
            byFastDelivery=true   → only fast-delivery products
            byRating=<n>, n > 0   → only products rated n or higher
            itemsPerPage/pageNum  → zero-based offset pagination

        Raises:
            ValidationError: pagination values that are not non-negative
                integers, a page size above max_items_per_page, or a page
                whose offset exceeds MAX_OFFSET.
        """
        price_sort = None
        if sort:
            price_sort = PriceSort.ASCENDING if sort == PriceSort.ASCENDING.value else PriceSort.DESCENDING

        page_size = _parse_non_negative_int(items_per_page, "itemsPerPage")
        if page_size == 0:
            page_size = None
        if page_size is not None and max_items_per_page is not None and page_size > max_items_per_page:
            raise ValidationError(
                message=f"itemsPerPage cannot exceed {max_items_per_page}",
                field="itemsPerPage",
            )
        page = _parse_non_negative_int(page_num, "pageNum") or 0
        if page_size is not None and page * page_size > MAX_OFFSET:
            raise ValidationError(message="pageNum is out of range", field="pageNum")

        # Whitespace is part of the search term; a blank term means no search
        search_text = search_query if search_query and search_query.strip() else None

        return cls(
            sort=price_sort,
            min_rating=_parse_rating(by_rating),
            in_stock_only=by_stock == "false",
            fast_delivery_only=by_fast_delivery == "true",
            search_text=search_text or None,
            page=page,
            page_size=page_size,
        )


@dataclass
class ProductPipeline:
    """Ordered query stages for one listing request."""
    filters: List[ColumnElement] = field(default_factory=list)
    order_by: List[ColumnElement] = field(default_factory=list)
    offset: int = 0
    limit: Optional[int] = None

    def data_query(self) -> Select:
        """SELECT products: filters, then sort, then offset/limit."""
        query = select(Product).where(*self.filters).order_by(*self.order_by)
        if self.offset:
            query = query.offset(self.offset)
        if self.limit is not None:
            query = query.limit(self.limit)
        return query

    def count_query(self) -> Select:
        """SELECT count(*) over the filtered set, ignoring sort and pagination."""
        return select(func.count()).select_from(Product).where(*self.filters)


def build_pipeline(params: ProductListParams) -> ProductPipeline:
    """
    Composes the stages for `params` in their fixed order.

    Example:
        >>> params = ProductListParams(sort=PriceSort.ASCENDING, page=1, page_size=2)
        >>> build_pipeline(params).data_query()   # ORDER BY price ASC LIMIT 2 OFFSET 2
    """
    pipeline = ProductPipeline()

    # ── Filter stages ─────────────────────────────────────────────────────
    if params.min_rating is not None:
        pipeline.filters.append(Product.rating >= params.min_rating)
    if params.fast_delivery_only:
        pipeline.filters.append(Product.fast_delivery.is_(True))
    if params.in_stock_only:
        pipeline.filters.append(Product.in_stock > 0)
    if params.search_text:
        pattern = f"%{_escape_like(params.search_text)}%"
        pipeline.filters.append(Product.name.ilike(pattern, escape=LIKE_ESCAPE))

    # ── Sort stage ────────────────────────────────────────────────────────
    # created_at/id tie-breakers keep pages disjoint when prices repeat
    if params.sort is PriceSort.ASCENDING:
        pipeline.order_by.append(asc(Product.price))
    elif params.sort is PriceSort.DESCENDING:
        pipeline.order_by.append(desc(Product.price))
    pipeline.order_by.extend([asc(Product.created_at), asc(Product.id)])

    # ── Paginate stage ────────────────────────────────────────────────────
    if params.page_size is not None:
        pipeline.offset = params.page * params.page_size
        pipeline.limit = params.page_size

    return pipeline
