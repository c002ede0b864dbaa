"""
ResilienceHub Backend — Application Package Initializer
=======================================================

What: Marks the `resilience_hub` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows the same layered layout for every resource family:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Auth dependencies (gates, cookies) │  ← Authenticator → Role Gates → Access scope
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Sessions, cache, access decisions
    ├─────────────────────────────────────┤
    │   Repositories, Models & Schemas    │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every protected request runs Authenticator → zero or more Role Gates →
    Access-Scope Resolver → route handler, each step an explicit FastAPI
    dependency that either returns a typed value or raises.
"""

__version__ = "1.0.0"
