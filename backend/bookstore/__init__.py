"""
Bookstore Backend — Application Package Initializer
====================================================

What: Marks the `bookstore` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is split into thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Book operations)      │  ← Validation, patch merging
    ├─────────────────────────────────────┤
    │   ResourceStore (versioned records) │  ← In-memory, lock-guarded map
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Pydantic records and contracts
    └─────────────────────────────────────┘

    Routes translate HTTP into service calls, services translate book payloads
    into store operations, and the store knows nothing about books.
"""

__version__ = "1.0.0"
