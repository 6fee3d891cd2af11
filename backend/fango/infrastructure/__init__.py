"""Infrastructure Layer — DB sessions, oracle clients, locks, logging.

Invariants:
    - All external calls carry a timeout and map failures to core/errors.py types

Design Decisions:
    - Resilient wrappers over raw clients (anthropic, httpx)
"""
