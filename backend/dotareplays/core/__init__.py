"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are deterministic given their inputs (token generation reads the CSPRNG and clock)

Design Decisions:
    - Functional core separated from the async store shell
"""
