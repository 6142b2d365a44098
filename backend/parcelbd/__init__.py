"""
ParcelBD Backend — Application Package Initializer
===================================================

What: Marks the `parcelbd` directory as a Python package.
Who:  Used by uvicorn (`uvicorn parcelbd.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Store / Gateway Adapters)│  ← Validation, persistence calls
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every request makes exactly one adapter call: router → service → response.
"""

__version__ = "1.0.0"
