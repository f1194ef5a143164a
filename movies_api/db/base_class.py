# movies_api/db/base_class.py
from __future__ import annotations

"""
# Movies API · SQLAlchemy Base

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (stable constraint/index names)
- Helpful `__repr__` for debugging

Table names are explicit on each model (`movies`, `genres`, `ratings`) since
the relational schema is shared with other consumers and must not drift.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Global declarative base for Movies API models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:  # pragma: no cover
        attrs = [f"{key}={getattr(self, key)!r}" for key in ("id", "slug", "userid", "movieid") if hasattr(self, key)]
        return f"{self.__class__.__name__}({', '.join(attrs)})"


__all__ = ["Base", "NAMING_CONVENTION"]
