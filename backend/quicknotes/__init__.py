"""
QuickNotes Backend — Package Initializer
==========================================

What: Marks the `quicknotes` directory as a Python package.
Who:  Used by uvicorn (quicknotes.main:app), pytest, and the client module.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │        Routes (HTTP Mapper)         │  ← status codes, JSON envelopes
    ├─────────────────────────────────────┤
    │        Services (Note Service)      │  ← validation, defaulting
    ├─────────────────────────────────────┤
    │        Stores (Note Store)          │  ← memory list or SQL table
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← Note record, ORM row, Pydantic
    └─────────────────────────────────────┘

    Each layer only talks to the one directly below it.
"""

__version__ = "1.0.0"
