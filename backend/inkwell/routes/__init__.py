# Routes package init
"""
Inkwell Backend: API Routes Package
=====================================

Route Inventory:
    - posts.py:   /posts...   (post CRUD, author/tag listings)
    - health.py:  GET /health     (service health check)

Routes stay thin: decode the request, call PostService with the request's
session, and map None results to 404.
"""
