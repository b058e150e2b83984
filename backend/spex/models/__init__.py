"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Card is the only mutable aggregate; Event is append-only

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/alembic
"""

from spex.models.card import Card  # noqa: F401
from spex.models.event import Event  # noqa: F401
