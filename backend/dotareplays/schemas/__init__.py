"""Pydantic Schemas — request/response bodies for API endpoints.

Invariants:
    - Schemas check JSON shape and types only; domain rules live in core/validation_rules.py
    - No response schema carries a credential hash or a token hash

Design Decisions:
    - Separate from models and core records: schemas are API contracts
"""
