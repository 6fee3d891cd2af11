"""Database Layer — declarative Base shared by every ORM model.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL; aiosqlite in tests
"""
