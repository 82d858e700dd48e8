"""
Inkwell Backend: Application Package Initializer
==================================================

What: Marks the `inkwell` directory as a Python package.
Who:  Imported by uvicorn (`inkwell.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is a thin layered CRUD service over a single `Post` entity:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       Services (Query Building)     │  ← one store call per operation
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate absence (None) into 404 responses; services never raise
    for a missing post. Schemas own validation; the database owns ids and
    timestamps.
"""

__version__ = "1.0.0"
