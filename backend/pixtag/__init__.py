"""
PixTag Backend — Application Package Initializer
=================================================

What: Marks the `pixtag` directory as a Python package.
Why:  Enables module imports like `from pixtag.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, orchestration
    ├─────────────────────────────────────┤
    │      Store (AnnotationStore)        │  ← The only code that writes SQL
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never import a global session. Each request builds an
    AnnotationStore around its own session and hands it to the service,
    so every service call can be tested against any store.
"""

__version__ = "1.0.0"
