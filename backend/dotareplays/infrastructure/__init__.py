"""Infrastructure Layer — database sessions, logging, outbound mail.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Every external call is bounded by a timeout
"""
