# Services package init
"""
Product Catalog Backend — Services Layer
==========================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services accept a session, the authenticated user and validated
       schemas, apply the business rules, and return response schemas.

Service Inventory:
    - ProductService: list/get/create/update/delete with ownership checks
    - product_query:  listing parameters → filter/sort/paginate statements
"""
