# Services package init
"""
Inkwell Backend: Services Layer
=================================

Sits between routes (HTTP) and the database (persistence).

Service Inventory:
    - PostService: create/list/get/update/delete over the posts table,
      one statement per operation, default sort newest first
"""
