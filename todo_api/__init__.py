"""
Todo API — Application Package
================================

What: Task-tracking REST API (FastAPI + async SQLAlchemy).

Layers:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Handler logic)    │  ← not-found checks, error wrapping
    ├─────────────────────────────────────┤
    │     Repository / Models / Schemas   │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine and sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
