"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Errors mapped to HTTP status here and nowhere else

Design Decisions:
    - Thin routes delegate to services (ADR: impureim sandwich)
"""
