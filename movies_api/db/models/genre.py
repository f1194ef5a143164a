from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Table, Text, Uuid

from movies_api.db.base_class import Base

# No primary key and no uniqueness on (movieid, name), so this is a Core table
# rather than a mapped class.
genres_table = Table(
    "genres",
    Base.metadata,
    Column("movieid", Uuid, ForeignKey("movies.id"), nullable=False, index=True),
    Column("name", Text, nullable=False),
)
