"""API Layer — FastAPI routes, request dependencies, and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON envelopes: {"replay": ...}, {"user": ...}, {"error": ...}

Design Decisions:
    - Thin routes: parse, validate, call a store, wrap the result
"""
