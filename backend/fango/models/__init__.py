"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Project is the aggregate root; houses and round entries are scoped by project_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from fango.models.project import Project  # noqa: F401
from fango.models.house import House  # noqa: F401
from fango.models.round_entry import RoundEntry  # noqa: F401
