"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Claim state, credentials and vCard rendering are deterministic given inputs

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
