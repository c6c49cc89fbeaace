# Services package init
"""
QuickNotes Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and stores.
How:   NoteService is constructed with a NoteStore at application startup
       and reached by route handlers through FastAPI dependency injection.

Service Inventory:
    - NoteService: validation, defaulting and CRUD mapping for notes
"""
