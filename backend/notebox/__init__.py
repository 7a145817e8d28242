"""
Notebox Backend — Application Package Initializer
=================================================

What: Marks the `notebox` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Routes + Auth Gate (API Layer)    │  ← HTTP concerns, token extraction
    ├─────────────────────────────────────┤
    │     Services (Login, Note Access)   │  ← Orchestration
    ├─────────────────────────────────────┤
    │  Security (Hasher, Token Codec)     │  ← Pure computation, no I/O
    ├─────────────────────────────────────┤
    │   Repositories (User, Note stores)  │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
