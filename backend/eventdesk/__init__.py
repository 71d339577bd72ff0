"""
EventDesk Backend — Application Package Initializer
====================================================

What: Marks the `eventdesk` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, document building
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Event documents + Pydantic payloads
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← MongoDB event store
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
