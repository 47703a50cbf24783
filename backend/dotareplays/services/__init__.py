"""Service Layer — async stores over one AsyncSession each.

Invariants:
    - Each store method is one bounded, self-committing unit of work
    - Stores raise typed errors from core/errors.py; they never return error values
"""
