# Middleware package init
"""
Product Catalog Backend — Middleware Package
==============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID first, so every later log line can carry the correlation id
    - Logging measures the full handler time and the final status code
    - Authentication is NOT middleware: protected routes declare the
      get_current_user dependency and pass the user to the service
"""
