"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure; randomness is injected (random.Random)

Design Decisions:
    - Functional core separated from imperative shell: services read from the
      DB and oracles, hand plain values to core, and persist what core decides
"""
