"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Routes never contain dispatch logic (delegate to services.dispatcher)
"""
