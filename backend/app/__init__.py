"""
Inkwell Backend: Application Package Initializer
=================================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn (`app.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is a thin layered REST service for a blog:

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns, Auth Gate dependency
    ├─────────────────────────────────────┤
    │   Services (Business Logic)         │  ← credentials, tokens, ownership checks
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never build HTTP responses.
"""

__version__ = "1.0.0"
