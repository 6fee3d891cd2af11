"""Services Layer — item store, round ledger, profile builder, ranking chain, round controller.

Invariants:
    - Services receive an AsyncSession; round transitions are committed only by the
      round controller
    - Oracle clients are injected (never constructed inside a service)

Design Decisions:
    - One file per component for locality
"""
