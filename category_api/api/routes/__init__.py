"""
API route modules.

- categories: CRUD routers for user and supplier categories, built by one factory

Routers are included from category_api.api.main (under the /api/v1 prefix).
"""
