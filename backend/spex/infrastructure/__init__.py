"""Infrastructure Layer — database sessions, file storage and logging.

Invariants:
    - Infrastructure never imports from services/ or api/
    - All SQLAlchemy failures surface as DatabaseError

Design Decisions:
    - Thin wrappers over raw clients (ADR: single responsibility)
"""
