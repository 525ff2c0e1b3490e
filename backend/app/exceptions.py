"""
Product Catalog Backend — Custom Exception Hierarchy
======================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the auth dependency; caught by global handlers.
When:  During request processing. Every failure is terminal for the request.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError     → 400 Bad Request (client can fix)
    ├── NotFoundError       → 400 Bad Request ("Product not found")
    ├── UnauthorizedError   → 401 Unauthorized (no token, bad token, not owner)
    └── DatabaseError       → 500 Internal Server Error

A missing product is reported as 400, not 404: API consumers of the
products endpoints already branch on 400 + "Product not found".
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """
    Base exception for all catalog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless the handler explicitly includes it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails validation.

    When:    Missing product name, malformed pagination parameters.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Please add a name",
            "details": {"field": "name"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(CatalogError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /api/products/{id} with an unknown or malformed id.
    HTTP:    400 Bad Request

    The message is "<Resource> not found" (e.g. "Product not found").
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class UnauthorizedError(CatalogError):
    """
    Raised when the caller is not allowed to perform the request.

    When:
        - No Bearer token ("Not authorized, no token")
        - Token invalid or expired ("Not authorized")
        - No authenticated user reached the service ("User not found")
        - Authenticated user does not own the product ("User not authorized")
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatalogError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
