# Routes package init
"""
Product Catalog Backend — API Routes Package
==============================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - products.py: GET/POST  /api/products
                   GET/PUT/DELETE /api/products/{id}
    - health.py:   GET /health

Routes are thin: they read the request, resolve the caller, call the
service, and set response headers. Business rules live in services.
"""
