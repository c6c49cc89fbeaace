# Middleware package init
"""
QuickNotes Backend — Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID first, so every later log line can carry it
    - Logging measures the full downstream duration and final status
"""
