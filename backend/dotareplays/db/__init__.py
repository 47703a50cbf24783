"""Database Declarations — the SQLAlchemy Base shared by every ORM model.

Invariants:
    - Single async engine per process (initialized via infrastructure.database.init_db)
"""
